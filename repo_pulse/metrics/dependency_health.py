"""Dependency health metric."""

import re
from typing import NamedTuple

from repo_pulse.dependency_parsers.base import NormalizedManifest

EXACT_VERSION_PATTERN = re.compile(r"^\d+\.\d+\.\d+(-[a-zA-Z0-9.-]+)?$")


class EcosystemHealth(NamedTuple):
    total: int
    outdated: int


class DependencyHealth(NamedTuple):
    """Pinned vs. unpinned dependency counts."""

    total: int
    outdated: int
    vulnerable: int
    latest: int
    ecosystems: dict[str, EcosystemHealth]

    def to_dict(self) -> dict[str, object]:
        return {
            "total": self.total,
            "outdated": self.outdated,
            "vulnerable": self.vulnerable,
            "latest": self.latest,
            "ecosystems": {
                name: health._asdict() for name, health in self.ecosystems.items()
            },
        }


EMPTY_DEPENDENCY_HEALTH = DependencyHealth(
    total=0, outdated=0, vulnerable=0, latest=0, ecosystems={}
)


def is_pinned_version(version: str | None) -> bool:
    """Whether ``version`` is an exact ``MAJOR.MINOR.PATCH[-pre]`` pin."""
    if not version:
        return False
    return EXACT_VERSION_PATTERN.match(str(version).strip()) is not None


def is_outdated_version(version: str | None) -> bool:
    """
    Heuristic "outdated" classification of a version spec.

    Anything that is not an exact pin counts: ranges (``^ ~ > < =``),
    wildcards (``*``, ``x``), partial versions, empty strings and
    ``"unknown"``. No registry is consulted, so an old exact pin is never
    outdated and a range that resolves to the newest release always is.
    """
    return not is_pinned_version(version)


def analyze_dependency_health(manifest: NormalizedManifest | None) -> DependencyHealth:
    """
    Evaluates how many declared dependencies use unpinned version specs.

    Counts runtime and dev dependencies. Peer dependencies declare
    compatibility ranges for the host project and are not counted.
    ``vulnerable`` is always 0 since no advisory database is queried.

    Args:
        manifest: Parsed manifest, or None when no manifest was found.

    Returns:
        DependencyHealth; all zeros when ``manifest`` is None.
    """
    if manifest is None:
        return EMPTY_DEPENDENCY_HEALTH

    # dev entries override runtime entries of the same name
    versions = {**(manifest.dependencies or {}), **(manifest.dev_dependencies or {})}
    total = len(manifest.dependencies or {}) + len(manifest.dev_dependencies or {})
    outdated = sum(1 for version in versions.values() if is_outdated_version(version))

    return DependencyHealth(
        total=total,
        outdated=outdated,
        vulnerable=0,
        latest=total - outdated,
        ecosystems={manifest.ecosystem: EcosystemHealth(total=total, outdated=outdated)},
    )
