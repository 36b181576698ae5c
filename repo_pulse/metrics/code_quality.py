"""
Code quality metrics.

Combines review turnaround, code churn and dependency health into one report
and derives advisory recommendations from them.
"""

from datetime import datetime
from typing import NamedTuple

from repo_pulse.dependency_parsers.base import NormalizedManifest
from repo_pulse.metrics.base import round_half_up, round_one, utc_now_iso
from repo_pulse.metrics.code_churn import ChurnDay, calculate_code_churn
from repo_pulse.metrics.dependency_health import (
    DependencyHealth,
    analyze_dependency_health,
)
from repo_pulse.metrics.review_time import calculate_review_times
from repo_pulse.models import CommitStat, PullRequestRecord

ALL_GOOD_MESSAGE = "Code quality metrics look good! Keep up the great work."


class CodeQualityMetrics(NamedTuple):
    average_pr_review_time: float
    median_pr_review_time: float
    code_churn: list[ChurnDay]
    average_churn_per_commit: int
    dependency_health: DependencyHealth
    recommendations: list[str]
    last_calculated: str

    def to_dict(self) -> dict[str, object]:
        return {
            "averagePRReviewTime": self.average_pr_review_time,
            "medianPRReviewTime": self.median_pr_review_time,
            "codeChurn": [day.to_dict() for day in self.code_churn],
            "averageChurnPerCommit": self.average_churn_per_commit,
            "dependencyHealth": self.dependency_health.to_dict(),
            "recommendations": list(self.recommendations),
            "lastCalculated": self.last_calculated,
        }


def _review_time_recommendation(hours: float) -> str | None:
    shown = round_one(hours)
    if hours > 72:
        return (
            f"PR review time is very high ({shown:.1f}h). Consider setting "
            "review SLAs or automating review assignments."
        )
    if hours > 48:
        return (
            "Consider improving PR review turnaround time "
            f"(currently {shown:.1f} hours). Aim for < 24 hours."
        )
    if hours > 24:
        return (
            "PR review time is good but could be improved "
            f"(currently {shown:.1f} hours)."
        )
    return None


def _dependency_recommendation(health: DependencyHealth) -> str | None:
    if health.total == 0:
        return "Consider adding dependency management for better project organization"

    percentage = health.outdated / health.total * 100
    if percentage > 50:
        return (
            f"High percentage of outdated dependencies ({round_half_up(percentage)}%). "
            "Prioritize security updates."
        )
    if percentage > 30:
        return (
            f"Update outdated dependencies ({health.outdated}/{health.total}) "
            "to improve security and compatibility"
        )
    if percentage > 10:
        return (
            f"Some dependencies may need updates "
            f"({health.outdated}/{health.total} outdated)"
        )
    return None


def _churn_recommendation(average_churn: int) -> str | None:
    if average_churn > 1000:
        return (
            f"Very large commits detected (avg {average_churn} lines). Consider "
            "breaking changes into smaller, focused commits for better code review."
        )
    if average_churn > 500:
        return (
            f"Large commits detected (avg {average_churn} lines). Consider "
            "breaking down into smaller, focused changes."
        )
    if average_churn < 10:
        return (
            f"Very small commits (avg {average_churn} lines). "
            "Consider batching related changes together."
        )
    return None


def generate_code_quality_recommendations(
    average_review_time: float | None,
    dependency_health: DependencyHealth | None,
    average_churn_per_commit: int | None,
) -> list[str]:
    """
    Advisory messages for review speed, dependency pinning and commit size.

    A zero or missing review time or churn average means "no data" and emits
    nothing for that signal. A dependency report with no dependencies at all
    suggests adding dependency management.

    Returns:
        At least one message; a single "looks good" message when no signal
        fires.
    """
    recommendations: list[str] = []

    if average_review_time:
        message = _review_time_recommendation(average_review_time)
        if message:
            recommendations.append(message)

    if dependency_health is not None:
        message = _dependency_recommendation(dependency_health)
        if message:
            recommendations.append(message)

    if average_churn_per_commit:
        message = _churn_recommendation(average_churn_per_commit)
        if message:
            recommendations.append(message)

    if not recommendations:
        recommendations.append(ALL_GOOD_MESSAGE)

    return recommendations


def build_code_quality_metrics(
    prs: list[PullRequestRecord],
    commits: list[CommitStat],
    manifest: NormalizedManifest | None,
    now: datetime | None = None,
) -> CodeQualityMetrics:
    """
    Build the code quality report from already-fetched records.

    Args:
        prs: PR sample with reviews attached.
        commits: Commit sample, with stats where they could be fetched.
        manifest: First manifest found in the repository, or None.
        now: Timestamp for ``last_calculated``; defaults to the current time.

    Returns:
        CodeQualityMetrics with review times rounded to one decimal.
        Recommendations are derived from the unrounded review average.
    """
    review_times = calculate_review_times(prs)
    churn = calculate_code_churn(commits)
    dependency_health = analyze_dependency_health(manifest)

    return CodeQualityMetrics(
        average_pr_review_time=round_one(review_times.average),
        median_pr_review_time=round_one(review_times.median),
        code_churn=churn.churn_data,
        average_churn_per_commit=churn.average_churn_per_commit,
        dependency_health=dependency_health,
        recommendations=generate_code_quality_recommendations(
            review_times.average,
            dependency_health,
            churn.average_churn_per_commit,
        ),
        last_calculated=utc_now_iso(now),
    )
