"""Ruby Gemfile parser."""

import re

from repo_pulse.dependency_parsers.base import (
    ManifestParser,
    NormalizedManifest,
    iter_lines,
)

_GEM_PATTERN = re.compile(r"""^gem\s+['"]([^'"]+)['"]\s*(?:,\s*['"]([^'"]+)['"])?""")


def parse_gemfile(content: str) -> NormalizedManifest | None:
    """Parse ``gem "name", "version"`` lines; a missing version is ``"unknown"``."""
    dependencies: dict[str, str] = {}

    for line in iter_lines(content):
        if not line or line.startswith("#"):
            continue
        match = _GEM_PATTERN.match(line)
        if match:
            dependencies[match.group(1)] = match.group(2) or "unknown"

    if not dependencies:
        return None

    return NormalizedManifest(dependencies=dependencies, ecosystem="ruby")


PARSER = ManifestParser(
    filename="Gemfile",
    ecosystem="ruby",
    parse=parse_gemfile,
)
