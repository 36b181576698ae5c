"""
Repository health score.

A 0-100 composite of five independently capped categories:

- Documentation (30): README length, CONTRIBUTING, CHANGELOG, CODE_OF_CONDUCT
- Maintenance (25): recent commit count and commit frequency
- Community (20): stars, forks, open issue activity
- Issue response (15): mean time to close issues and resolution rate
- Code quality (10): license, CI, wiki, pages, forking

Each category is clamped before summing, so the overall score never exceeds
100 and always equals the sum of the breakdown.
"""

import math
from datetime import datetime
from typing import NamedTuple

from repo_pulse.metrics.base import clamp, inverse_tier_score, tier_score, utc_now_iso
from repo_pulse.models import RepositoryMetadata

DOCUMENTATION_CAP = 30
MAINTENANCE_CAP = 25
COMMUNITY_CAP = 20
ISSUE_RESPONSE_CAP = 15
CODE_QUALITY_CAP = 10

# (exclusive lower bound, points), checked in order
README_LENGTH_TIERS = ((2000, 15), (1000, 12), (500, 8), (100, 5))
RECENT_COMMIT_TIERS = ((20, 15), (10, 12), (5, 8), (0, 5))
COMMIT_FREQUENCY_TIERS = ((50, 10), (20, 8), (10, 5), (0, 2))
STAR_TIERS = ((1000, 8), (500, 6), (100, 4), (10, 2))
FORK_TIERS = ((100, 6), (50, 4), (10, 2))
# (exclusive upper bound in hours, points), checked in order
ISSUE_RESPONSE_TIERS = ((24, 15), (72, 12), (168, 8), (720, 4))

DOCUMENT_FILE_POINTS = 5
OPEN_ISSUES_PER_POINT = 10
OPEN_ISSUES_MAX_POINTS = 6
RESOLUTION_BONUS_MAX = 5
LICENSE_POINTS = 3
CI_POINTS = 4
REPO_FEATURE_POINTS = 1

# Advisory cutoffs for recommendations, independent of the caps
DOCUMENTATION_THRESHOLD = 20
MAINTENANCE_THRESHOLD = 15
COMMUNITY_THRESHOLD = 12
ISSUE_RESPONSE_THRESHOLD = 10
CODE_QUALITY_THRESHOLD = 6
MIN_README_LENGTH = 500


class HealthScoreInput(NamedTuple):
    """Signals collected for a repository before scoring."""

    repo: RepositoryMetadata
    readme_length: int = 0
    has_contributing: bool = False
    has_changelog: bool = False
    has_license: bool = False
    has_code_of_conduct: bool = False
    recent_commits: int | None = None
    commit_frequency: int | None = None
    issue_response_time: float | None = None  # hours
    issue_resolution_rate: float | None = None  # percent
    has_ci: bool = False


class HealthScoreBreakdown(NamedTuple):
    documentation: int
    maintenance: int
    community: int
    issue_response: int
    code_quality: int

    def to_dict(self) -> dict[str, int]:
        return {
            "documentation": self.documentation,
            "maintenance": self.maintenance,
            "community": self.community,
            "issueResponse": self.issue_response,
            "codeQuality": self.code_quality,
        }


class RepoHealthScore(NamedTuple):
    overall: int
    breakdown: HealthScoreBreakdown
    recommendations: list[str]
    last_calculated: str

    def to_dict(self) -> dict[str, object]:
        return {
            "overall": self.overall,
            "breakdown": self.breakdown.to_dict(),
            "recommendations": list(self.recommendations),
            "lastCalculated": self.last_calculated,
        }


def score_documentation(
    data: HealthScoreInput,
    readme_tiers: tuple[tuple[float, int], ...] = README_LENGTH_TIERS,
    file_points: int = DOCUMENT_FILE_POINTS,
    cap: int = DOCUMENTATION_CAP,
) -> int:
    score = tier_score(data.readme_length, readme_tiers)
    for present in (data.has_contributing, data.has_changelog, data.has_code_of_conduct):
        if present:
            score += file_points
    return clamp(score, cap)


def score_maintenance(
    data: HealthScoreInput,
    recent_commit_tiers: tuple[tuple[float, int], ...] = RECENT_COMMIT_TIERS,
    frequency_tiers: tuple[tuple[float, int], ...] = COMMIT_FREQUENCY_TIERS,
    cap: int = MAINTENANCE_CAP,
) -> int:
    score = tier_score(data.recent_commits, recent_commit_tiers)
    score += tier_score(data.commit_frequency, frequency_tiers)
    return clamp(score, cap)


def score_community(
    data: HealthScoreInput,
    star_tiers: tuple[tuple[float, int], ...] = STAR_TIERS,
    fork_tiers: tuple[tuple[float, int], ...] = FORK_TIERS,
    cap: int = COMMUNITY_CAP,
) -> int:
    """
    Stars and forks tiers plus one point per 10 open issues (at most 6).

    Open issues count as engagement here, not as backlog.
    """
    repo = data.repo
    score = tier_score(repo.stargazers_count, star_tiers)
    score += tier_score(repo.forks_count, fork_tiers)
    if repo.open_issues_count > 0:
        score += min(
            OPEN_ISSUES_MAX_POINTS, repo.open_issues_count // OPEN_ISSUES_PER_POINT
        )
    return clamp(score, cap)


def score_issue_response(
    data: HealthScoreInput,
    response_tiers: tuple[tuple[float, int], ...] = ISSUE_RESPONSE_TIERS,
    cap: int = ISSUE_RESPONSE_CAP,
) -> int:
    score = inverse_tier_score(data.issue_response_time, response_tiers)
    if data.issue_resolution_rate is not None:
        rate = max(0.0, data.issue_resolution_rate)
        score += math.floor(rate / 100 * RESOLUTION_BONUS_MAX)
    return clamp(score, cap)


def score_code_quality(data: HealthScoreInput, cap: int = CODE_QUALITY_CAP) -> int:
    score = 0
    if data.has_license:
        score += LICENSE_POINTS
    if data.has_ci:
        score += CI_POINTS
    for enabled in (data.repo.has_wiki, data.repo.has_pages, data.repo.allow_forking):
        if enabled:
            score += REPO_FEATURE_POINTS
    return clamp(score, cap)


def generate_health_recommendations(
    breakdown: HealthScoreBreakdown, data: HealthScoreInput
) -> list[str]:
    """Turn low category scores into advisory messages."""
    recommendations: list[str] = []

    if breakdown.documentation < DOCUMENTATION_THRESHOLD:
        if not data.readme_length or data.readme_length < MIN_README_LENGTH:
            recommendations.append(
                "Add a comprehensive README with installation and usage instructions"
            )
        if not data.has_contributing:
            recommendations.append("Add a CONTRIBUTING.md file to guide contributors")
        if not data.has_license:
            recommendations.append("Add a LICENSE file to clarify usage rights")

    if breakdown.maintenance < MAINTENANCE_THRESHOLD:
        recommendations.append("Increase commit frequency to show active maintenance")

    if breakdown.community < COMMUNITY_THRESHOLD:
        recommendations.append(
            "Engage with the community through issues and discussions"
        )

    if breakdown.issue_response < ISSUE_RESPONSE_THRESHOLD:
        recommendations.append(
            "Respond to issues more quickly to improve community engagement"
        )

    if breakdown.code_quality < CODE_QUALITY_THRESHOLD:
        if not data.has_ci:
            recommendations.append("Set up CI/CD to ensure code quality")
        if not data.has_license:
            recommendations.append("Add a LICENSE file")

    return recommendations


def calculate_health_score(
    data: HealthScoreInput, now: datetime | None = None
) -> RepoHealthScore:
    """
    Calculate the repository health score.

    Args:
        data: Collected repository signals.
        now: Timestamp for ``last_calculated``; defaults to the current time.

    Returns:
        RepoHealthScore whose ``overall`` is the sum of the breakdown.
    """
    breakdown = HealthScoreBreakdown(
        documentation=score_documentation(data),
        maintenance=score_maintenance(data),
        community=score_community(data),
        issue_response=score_issue_response(data),
        code_quality=score_code_quality(data),
    )

    return RepoHealthScore(
        overall=sum(breakdown),
        breakdown=breakdown,
        recommendations=generate_health_recommendations(breakdown, data),
        last_calculated=utc_now_iso(now),
    )
