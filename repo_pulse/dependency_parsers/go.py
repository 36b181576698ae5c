"""Go go.mod parser."""

import re

from repo_pulse.dependency_parsers.base import (
    ManifestParser,
    NormalizedManifest,
    iter_lines,
)

_REQUIRE_LINE_PATTERN = re.compile(r"^require\s+(\S+)\s+(\S+)")
_REQUIRE_BLOCK_ENTRY_PATTERN = re.compile(r"^(\S+)\s+(\S+)")


def parse_go_mod(content: str) -> NormalizedManifest | None:
    """
    Parse go.mod content.

    Handles single-line ``require module v1.2.3`` directives as well as
    ``require ( ... )`` blocks. Trailing ``// indirect`` markers are ignored.
    """
    dependencies: dict[str, str] = {}
    in_require_block = False

    for line in iter_lines(content):
        if not line or line.startswith("//") or line.startswith("module "):
            continue

        if in_require_block:
            if line.startswith(")"):
                in_require_block = False
                continue
            match = _REQUIRE_BLOCK_ENTRY_PATTERN.match(line)
            if match:
                dependencies[match.group(1)] = match.group(2)
            continue

        if re.match(r"^require\s*\($", line):
            in_require_block = True
            continue

        match = _REQUIRE_LINE_PATTERN.match(line)
        if match:
            dependencies[match.group(1)] = match.group(2)

    if not dependencies:
        return None

    return NormalizedManifest(dependencies=dependencies, ecosystem="go")


PARSER = ManifestParser(
    filename="go.mod",
    ecosystem="go",
    parse=parse_go_mod,
)
