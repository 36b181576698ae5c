"""Python requirements.txt and pyproject.toml parsers."""

import re

from repo_pulse.dependency_parsers.base import (
    ManifestParser,
    NormalizedManifest,
    iter_lines,
)

_REQUIREMENT_PATTERN = re.compile(r"^([a-zA-Z0-9_-]+[a-zA-Z0-9._-]*)([=<>!~]+)?(.+)?$")
_PYPROJECT_ENTRY_PATTERN = re.compile(r'^"?([^"]+)"?\s*=\s*"?([^"]+)"?')

_PYPROJECT_DEPENDENCY_HEADERS = ("[project.dependencies]", "[dependencies]")
_PYPROJECT_DEV_HEADERS = (
    "[project.optional-dependencies]",
    "[tool.poetry.dev-dependencies]",
)


def parse_requirements_txt(content: str) -> NormalizedManifest | None:
    """
    Parse requirements.txt content.

    Names are lower-cased. An exact ``==`` pin keeps only the version; any
    other operator is kept in front of the version (``">=2.0"``). A bare name
    maps to ``"unknown"``. Lines that do not look like requirements (options,
    URLs) are dropped.

    Returns:
        NormalizedManifest, or None when no requirement was recognized.
    """
    dependencies: dict[str, str] = {}

    for line in iter_lines(content):
        if not line or line.startswith(("#", "-")):
            continue
        line = line.split(" #", 1)[0].strip()
        match = _REQUIREMENT_PATTERN.match(line)
        if not match:
            continue
        name = match.group(1).lower()
        operator = match.group(2) or ""
        version = (match.group(3) or "").strip()
        if not version:
            dependencies[name] = "unknown"
        elif operator in ("", "=="):
            dependencies[name] = version
        else:
            dependencies[name] = f"{operator}{version}"

    if not dependencies:
        return None

    return NormalizedManifest(dependencies=dependencies, ecosystem="python")


def parse_pyproject_toml(content: str) -> NormalizedManifest | None:
    """
    Parse pyproject.toml content with a line scanner.

    Only ``key = "value"`` tables are understood: ``[project.dependencies]`` /
    ``[dependencies]`` and ``[project.optional-dependencies]`` /
    ``[tool.poetry.dev-dependencies]``. Any other header or a comment line
    ends the current section. PEP 621 dependency arrays are not read.
    """
    dependencies: dict[str, str] = {}
    dev_dependencies: dict[str, str] = {}
    target: dict[str, str] | None = None

    for line in iter_lines(content):
        if line.startswith(_PYPROJECT_DEPENDENCY_HEADERS):
            target = dependencies
            continue
        if line.startswith(_PYPROJECT_DEV_HEADERS):
            target = dev_dependencies
            continue
        if line.startswith("[") or line.startswith("#"):
            target = None
            continue
        if target is None:
            continue

        match = _PYPROJECT_ENTRY_PATTERN.match(line)
        if match:
            name = match.group(1).replace('"', "").strip()
            version = match.group(2).replace('"', "").strip()
            target[name] = version

    if not dependencies and not dev_dependencies:
        return None

    return NormalizedManifest(
        dependencies=dependencies,
        dev_dependencies=dev_dependencies or None,
        ecosystem="python",
    )


REQUIREMENTS_PARSER = ManifestParser(
    filename="requirements.txt",
    ecosystem="python",
    parse=parse_requirements_txt,
)

PYPROJECT_PARSER = ManifestParser(
    filename="pyproject.toml",
    ecosystem="python",
    parse=parse_pyproject_toml,
)
