"""
Dependency manifest parsers.

Each supported manifest format is described by a ``ManifestParser`` entry.
``MANIFEST_PARSERS`` lists them in lookup priority order: when analyzing a
repository, the first manifest that exists and parses wins and the remaining
formats are not checked.
"""

from typing import Callable

from repo_pulse.dependency_parsers import go, javascript, python, ruby, rust
from repo_pulse.dependency_parsers.base import ManifestParser, NormalizedManifest
from repo_pulse.dependency_parsers.go import parse_go_mod
from repo_pulse.dependency_parsers.javascript import parse_package_json
from repo_pulse.dependency_parsers.python import (
    parse_pyproject_toml,
    parse_requirements_txt,
)
from repo_pulse.dependency_parsers.ruby import parse_gemfile
from repo_pulse.dependency_parsers.rust import parse_cargo_toml

__all__ = [
    "MANIFEST_PARSERS",
    "ManifestParser",
    "NormalizedManifest",
    "get_manifest_parser",
    "list_manifest_files",
    "parse_cargo_toml",
    "parse_first_manifest",
    "parse_gemfile",
    "parse_go_mod",
    "parse_manifest",
    "parse_package_json",
    "parse_pyproject_toml",
    "parse_requirements_txt",
]

MANIFEST_PARSERS: tuple[ManifestParser, ...] = (
    javascript.PARSER,
    python.REQUIREMENTS_PARSER,
    python.PYPROJECT_PARSER,
    rust.PARSER,
    go.PARSER,
    ruby.PARSER,
)


def list_manifest_files() -> list[str]:
    """Return supported manifest filenames in lookup priority order."""
    return [parser.filename for parser in MANIFEST_PARSERS]


def get_manifest_parser(filename: str) -> ManifestParser | None:
    """
    Get the parser for a manifest filename.

    Args:
        filename: Bare filename or path; only the final component is used.

    Returns:
        ManifestParser or None if the format is not supported.
    """
    name = filename.replace("\\", "/").rsplit("/", 1)[-1]
    for parser in MANIFEST_PARSERS:
        if parser.filename == name:
            return parser
    return None


def parse_manifest(filename: str, content: str) -> NormalizedManifest | None:
    """Parse ``content`` with the parser registered for ``filename``."""
    parser = get_manifest_parser(filename)
    if parser is None:
        return None
    return parser.parse(content)


def parse_first_manifest(
    fetch: Callable[[str], str | None],
) -> tuple[ManifestParser, NormalizedManifest] | None:
    """
    Find the first manifest that exists and parses.

    Args:
        fetch: Returns the text of a file by name, or None when the file is
            missing or could not be fetched.

    Returns:
        Tuple of (parser, manifest), or None when no supported manifest parsed.
    """
    for parser in MANIFEST_PARSERS:
        content = fetch(parser.filename)
        if not content:
            continue
        manifest = parser.parse(content)
        if manifest is not None:
            return parser, manifest
    return None
