"""
Prompt construction for narrative repository summaries.

Only the prompt is built here; sending it to a language model is left to the
caller. Every rendered prompt passes through ``redact_secrets`` so tokens that
leak into descriptions or error details are never forwarded.
"""

from repo_pulse.errors import redact_secrets
from repo_pulse.metrics.code_quality import CodeQualityMetrics
from repo_pulse.metrics.health_score import RepoHealthScore
from repo_pulse.metrics.pr_analytics import PRAnalytics
from repo_pulse.models import RepositoryMetadata

SYSTEM_PROMPT = (
    "You are a senior engineer reviewing the health of an open source "
    "repository. Using only the metrics provided, write a short assessment: "
    "strengths, risks and the two or three most valuable next steps. Do not "
    "invent numbers that are not in the data."
)

MAX_TOPICS = 6
MAX_REVIEWERS = 5


def _metadata_lines(repo: RepositoryMetadata) -> list[str]:
    lines = []
    if repo.description:
        lines.append(f"Description: {repo.description}")
    if repo.language:
        lines.append(f"Primary language: {repo.language}")
    if repo.topics:
        lines.append(f"Topics: {', '.join(repo.topics[:MAX_TOPICS])}")
    if repo.license_name:
        lines.append(f"License: {repo.license_name}")
    if repo.homepage:
        lines.append(f"Homepage: {repo.homepage}")
    lines.append(
        f"Stats: {repo.stargazers_count} stars, {repo.forks_count} forks, "
        f"{repo.open_issues_count} open issues"
    )
    return lines


def _health_lines(health: RepoHealthScore) -> list[str]:
    b = health.breakdown
    lines = [
        f"Health score: {health.overall}/100 "
        f"(documentation {b.documentation}/30, maintenance {b.maintenance}/25, "
        f"community {b.community}/20, issue response {b.issue_response}/15, "
        f"code quality {b.code_quality}/10)"
    ]
    lines.extend(f"- {item}" for item in health.recommendations)
    return lines


def _quality_lines(quality: CodeQualityMetrics) -> list[str]:
    deps = quality.dependency_health
    lines = [
        f"PR review time: average {quality.average_pr_review_time}h, "
        f"median {quality.median_pr_review_time}h",
        f"Average churn per commit: {quality.average_churn_per_commit} lines "
        f"over {len(quality.code_churn)} active days",
        f"Dependencies: {deps.total} declared, {deps.outdated} unpinned",
    ]
    lines.extend(f"- {item}" for item in quality.recommendations)
    return lines


def _analytics_lines(analytics: PRAnalytics) -> list[str]:
    sizes = analytics.pr_size_analysis
    lines = [
        f"Pull requests: {analytics.total_prs} total, {analytics.merged_prs} merged, "
        f"{analytics.closed_prs} closed unmerged, {analytics.open_prs} open "
        f"({analytics.success_rate}% merged)",
        f"Review turnaround: {analytics.average_review_turnaround_time}h",
        f"PR sizes: {sizes.small} small, {sizes.medium} medium, {sizes.large} large",
    ]
    if analytics.merge_time_distribution:
        buckets = ", ".join(
            f"{bucket.range}: {bucket.count}"
            for bucket in analytics.merge_time_distribution
        )
        lines.append(f"Merge times: {buckets}")
    if analytics.active_reviewers:
        reviewers = ", ".join(
            f"{reviewer.login} ({reviewer.reviews})"
            for reviewer in analytics.active_reviewers[:MAX_REVIEWERS]
        )
        lines.append(f"Top reviewers: {reviewers}")
    return lines


def build_repository_prompt(
    repo_name: str,
    health: RepoHealthScore | None = None,
    quality: CodeQualityMetrics | None = None,
    analytics: PRAnalytics | None = None,
    repo: RepositoryMetadata | None = None,
) -> str:
    """
    Render computed metrics into the user prompt of a summary request.

    Args:
        repo_name: ``owner/repo`` shown in the prompt header.
        health: Health score, if computed.
        quality: Code quality metrics, if computed.
        analytics: PR analytics, if computed.
        repo: Repository metadata for the descriptive header.

    Returns:
        Prompt text with secrets redacted. Sections for missing reports are
        omitted.
    """
    sections = [[f"Repository: {repo_name}"]]
    if repo is not None:
        sections[0].extend(_metadata_lines(repo))
    if health is not None:
        sections.append(_health_lines(health))
    if quality is not None:
        sections.append(_quality_lines(quality))
    if analytics is not None:
        sections.append(_analytics_lines(analytics))

    text = "\n\n".join("\n".join(lines) for lines in sections)
    return redact_secrets(text)


def build_messages(prompt: str) -> list[dict[str, str]]:
    """Chat-completion style message list for ``prompt``."""
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]
