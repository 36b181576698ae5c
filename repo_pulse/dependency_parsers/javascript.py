"""npm package.json parser."""

import json

from repo_pulse.dependency_parsers.base import ManifestParser, NormalizedManifest


def _section(data: dict, key: str) -> dict[str, str]:
    section = data.get(key)
    if not isinstance(section, dict):
        return {}
    return {str(name): str(version) for name, version in section.items()}


def parse_package_json(content: str) -> NormalizedManifest | None:
    """
    Parse package.json content.

    Version strings are kept verbatim, range operators included. Missing
    sections become empty mappings.

    Returns:
        NormalizedManifest, or None for invalid JSON or a non-object document.
    """
    try:
        data = json.loads(content)
    except (json.JSONDecodeError, TypeError):
        return None
    if not isinstance(data, dict):
        return None

    return NormalizedManifest(
        dependencies=_section(data, "dependencies"),
        dev_dependencies=_section(data, "devDependencies"),
        peer_dependencies=_section(data, "peerDependencies"),
        ecosystem="npm",
    )


PARSER = ManifestParser(
    filename="package.json",
    ecosystem="npm",
    parse=parse_package_json,
)
