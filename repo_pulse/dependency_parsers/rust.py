"""Rust Cargo.toml parser."""

import re

from repo_pulse.dependency_parsers.base import (
    ManifestParser,
    NormalizedManifest,
    iter_lines,
)

_CARGO_ENTRY_PATTERN = re.compile(r'^([a-zA-Z0-9_-]+)\s*=\s*"([^"]+)"')


def parse_cargo_toml(content: str) -> NormalizedManifest | None:
    """
    Parse the ``[dependencies]`` table of Cargo.toml.

    Only plain ``name = "version"`` entries are read; inline tables such as
    ``serde = { version = "1", features = [...] }`` are skipped.
    """
    dependencies: dict[str, str] = {}
    in_dependencies = False

    for line in iter_lines(content):
        if line.startswith("[dependencies]"):
            in_dependencies = True
            continue
        if line.startswith("[") and not line.startswith("[dependencies"):
            in_dependencies = False
            continue
        if not in_dependencies or not line or line.startswith("#"):
            continue

        match = _CARGO_ENTRY_PATTERN.match(line)
        if match:
            dependencies[match.group(1)] = match.group(2)

    if not dependencies:
        return None

    return NormalizedManifest(dependencies=dependencies, ecosystem="rust")


PARSER = ManifestParser(
    filename="Cargo.toml",
    ecosystem="rust",
    parse=parse_cargo_toml,
)
