"""
Shared types for dependency manifest parsers.
"""

from typing import Callable, NamedTuple


class NormalizedManifest(NamedTuple):
    """Dependencies declared by a single manifest file."""

    dependencies: dict[str, str]
    dev_dependencies: dict[str, str] | None = None
    peer_dependencies: dict[str, str] | None = None
    ecosystem: str = "unknown"  # "npm", "python", "rust", "go", "ruby"

    def to_dict(self) -> dict[str, object]:
        return {
            "dependencies": dict(self.dependencies),
            "devDependencies": dict(self.dev_dependencies or {}),
            "peerDependencies": dict(self.peer_dependencies or {}),
            "ecosystem": self.ecosystem,
        }


class ManifestParser(NamedTuple):
    """Specification of a manifest file parser."""

    filename: str
    ecosystem: str
    parse: Callable[[str], NormalizedManifest | None]


def iter_lines(content: str):
    """Yield stripped lines of ``content``."""
    for line in content.splitlines():
        yield line.strip()
