"""
Analysis orchestration.

Each ``analyze_*`` function fetches what one report needs from GitHub, narrows
the payloads into records and hands them to the metric functions. Failures of
the primary request (the repository or user itself) propagate as
``GitHubApiError``; failures of per-item requests (reviews, commit details,
contributor lists, optional files) are logged and the item is skipped or
left without the extra data.
"""

import base64
import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Callable, TypeVar

import httpx

from repo_pulse.collaboration import (
    EMPTY_NETWORK,
    CollaborationNetwork,
    RepositoryActivity,
    build_collaboration_network,
)
from repo_pulse.config import SampleLimits, get_sample_limits
from repo_pulse.dependency_graph import DependencyGraphReport, build_dependency_report
from repo_pulse.dependency_parsers import NormalizedManifest, parse_first_manifest
from repo_pulse.errors import GitHubApiError
from repo_pulse.github_client import (
    GitHubClient,
    sanitize_owner,
    sanitize_repo_name,
)
from repo_pulse.metrics.base import hours_between, mean, parse_timestamp
from repo_pulse.metrics.code_quality import CodeQualityMetrics, build_code_quality_metrics
from repo_pulse.metrics.contributions import (
    ContributionDay,
    ContributionHeatmap,
    aggregate_contributions_by_date,
    format_contribution_data,
    heatmap_window,
)
from repo_pulse.metrics.health_score import (
    HealthScoreInput,
    RepoHealthScore,
    calculate_health_score,
)
from repo_pulse.metrics.pr_analytics import (
    EMPTY_PR_ANALYTICS,
    PRAnalytics,
    compute_pr_analytics,
)
from repo_pulse.models import (
    CommitStat,
    IssueRecord,
    PullRequestRecord,
    RepositoryMetadata,
    parse_commit,
    parse_contributor,
    parse_issue,
    parse_pull_request,
    parse_repository,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

RECENT_COMMIT_DAYS = 30
ISSUE_SAMPLE_SIZE = 30
PR_LIST_SIZE = 100
COLLABORATION_PAGE_SIZE = 30
MIN_HEATMAP_YEAR = 2000

CONTRIBUTION_CALENDAR_QUERY = """
query($username: String!, $from: DateTime!, $to: DateTime!) {
  user(login: $username) {
    contributionsCollection(from: $from, to: $to) {
      contributionCalendar {
        totalContributions
        weeks {
          contributionDays {
            date
            contributionCount
          }
        }
      }
    }
  }
}
"""


def _fetch_or_default(fetch: Callable[[], T], default: T, description: str) -> T:
    try:
        return fetch()
    except (GitHubApiError, httpx.HTTPError) as e:
        logger.debug("Skipping %s: %s", description, e)
        return default


def _as_list(payload: Any) -> list:
    return payload if isinstance(payload, list) else []


def _repo_path(owner: str, repo: str) -> str:
    return f"/repos/{sanitize_owner(owner)}/{sanitize_repo_name(repo)}"


def fetch_repository(client: GitHubClient, owner: str, repo: str) -> RepositoryMetadata:
    """Fetch repository metadata; raises GitHubApiError if it is inaccessible."""
    return parse_repository(client.get_json(_repo_path(owner, repo)))


def _decoded_length(payload: Any) -> int:
    if not isinstance(payload, dict) or not payload.get("content"):
        return 0
    try:
        return len(base64.b64decode(payload["content"]).decode("utf-8", "replace"))
    except ValueError:
        return 0


def issue_response_stats(
    issues: list[IssueRecord],
) -> tuple[float | None, float | None]:
    """
    Mean hours to close and resolution rate over an issue sample.

    Returns:
        Tuple of (mean hours to close over closed issues, percent closed);
        either is None when it cannot be computed.
    """
    if not issues:
        return None, None
    close_times = [
        hours_between(issue.created_at, issue.closed_at)
        for issue in issues
        if issue.created_at is not None and issue.closed_at is not None
    ]
    closed = sum(1 for issue in issues if issue.closed_at is not None)
    response_time = mean(close_times) if close_times else None
    return response_time, closed / len(issues) * 100


def analyze_repo_health(
    client: GitHubClient, owner: str, repo: str, now: datetime | None = None
) -> RepoHealthScore:
    """
    Collect health signals for a repository and score them.

    Args:
        client: GitHub client.
        owner: Repository owner.
        repo: Repository name.
        now: Reference time for the recent-commit window.

    Returns:
        RepoHealthScore.
    """
    now = now or datetime.now(timezone.utc)
    base = _repo_path(owner, repo)
    metadata = parse_repository(client.get_json(base))

    def exists(path: str) -> bool:
        return (
            _fetch_or_default(lambda: client.get_maybe_json(path), None, path)
            is not None
        )

    readme = _fetch_or_default(
        lambda: client.get_maybe_json(f"{base}/readme"), None, "README"
    )
    since = (now - timedelta(days=RECENT_COMMIT_DAYS)).isoformat().replace("+00:00", "Z")
    commits = _as_list(
        _fetch_or_default(
            lambda: client.get_maybe_json(f"{base}/commits?per_page=30&since={since}"),
            None,
            "recent commits",
        )
    )
    issues = [
        parse_issue(item)
        for item in _as_list(
            _fetch_or_default(
                lambda: client.get_maybe_json(
                    f"{base}/issues?state=all&per_page={ISSUE_SAMPLE_SIZE}"
                ),
                None,
                "issues",
            )
        )
    ]
    response_time, resolution_rate = issue_response_stats(issues)

    recent_commits = len(commits)
    signals = HealthScoreInput(
        repo=metadata,
        readme_length=_decoded_length(readme),
        has_contributing=exists(f"{base}/contents/CONTRIBUTING.md"),
        has_changelog=exists(f"{base}/contents/CHANGELOG.md"),
        has_license=metadata.license_name is not None,
        has_code_of_conduct=exists(f"{base}/contents/CODE_OF_CONDUCT.md"),
        recent_commits=recent_commits,
        commit_frequency=recent_commits,
        issue_response_time=response_time,
        issue_resolution_rate=resolution_rate,
        has_ci=exists(f"{base}/contents/.github/workflows"),
    )
    logger.debug("Health signals for %s: %s", metadata.full_name, signals)
    return calculate_health_score(signals, now=now)


def find_manifest(
    client: GitHubClient, base: str, branch: str
) -> NormalizedManifest | None:
    """Fetch manifests in priority order and return the first that parses."""
    found = parse_first_manifest(
        lambda filename: client.get_file_text(
            f"{base}/contents/{filename}?ref={branch}"
        )
    )
    if found is None:
        logger.debug("No supported manifest found in %s", base)
        return None
    parser, manifest = found
    logger.debug("Using %s from %s", parser.filename, base)
    return manifest


def _fetch_pr_with_reviews(client: GitHubClient, base: str, pr: Any) -> PullRequestRecord:
    number = pr.get("number") if isinstance(pr, dict) else None
    reviews = _fetch_or_default(
        lambda: _as_list(client.get_json(f"{base}/pulls/{number}/reviews")),
        None,
        f"reviews of PR #{number}",
    )
    return parse_pull_request(pr, reviews=reviews)


def _fetch_commit_detail(client: GitHubClient, base: str, commit: Any) -> CommitStat:
    sha = commit.get("sha") if isinstance(commit, dict) else None
    detail = _fetch_or_default(
        lambda: client.get_json(f"{base}/commits/{sha}"), commit, f"commit {sha}"
    )
    return parse_commit(detail)


def analyze_code_quality(
    client: GitHubClient,
    owner: str,
    repo: str,
    limits: SampleLimits | None = None,
    now: datetime | None = None,
) -> CodeQualityMetrics:
    """
    Review times, churn and dependency health for a repository.

    Reviews are fetched for the most recently updated PRs and stats for the
    latest commits on the default branch.
    """
    limits = limits or get_sample_limits()
    base = _repo_path(owner, repo)
    branch = parse_repository(client.get_json(base)).default_branch

    pr_list = _as_list(
        _fetch_or_default(
            lambda: client.get_json(
                f"{base}/pulls?state=all&per_page={PR_LIST_SIZE}&sort=updated"
            ),
            [],
            "pull requests",
        )
    )
    prs = [
        _fetch_pr_with_reviews(client, base, pr) for pr in pr_list[: limits.pr_details]
    ]

    commit_list = _as_list(
        _fetch_or_default(
            lambda: client.get_json(
                f"{base}/commits?per_page={limits.commits}&sha={branch}"
            ),
            [],
            "commits",
        )
    )
    commits = [
        _fetch_commit_detail(client, base, commit)
        for commit in commit_list[: limits.commits]
    ]

    manifest = find_manifest(client, base, branch)
    return build_code_quality_metrics(prs, commits, manifest, now=now)


def analyze_pr_analytics(
    client: GitHubClient,
    owner: str,
    repo: str,
    limits: SampleLimits | None = None,
) -> PRAnalytics:
    """
    PR analytics over the latest updated PRs.

    Counters cover the whole listing; sizes and reviews come from the
    detailed sample. A PR whose detail cannot be fetched is left out of the
    sample.
    """
    limits = limits or get_sample_limits()
    base = _repo_path(owner, repo)
    pr_list = _as_list(
        client.get_json(f"{base}/pulls?state=all&per_page={PR_LIST_SIZE}&sort=updated")
    )
    if not pr_list:
        return EMPTY_PR_ANALYTICS

    details: list[PullRequestRecord] = []
    for pr in pr_list[: limits.pr_details]:
        number = pr.get("number") if isinstance(pr, dict) else None
        detail = _fetch_or_default(
            lambda: client.get_json(f"{base}/pulls/{number}"), None, f"PR #{number}"
        )
        if detail is None:
            continue
        details.append(_fetch_pr_with_reviews(client, base, detail))

    prs = [parse_pull_request(pr) for pr in pr_list]
    return compute_pr_analytics(prs, details)


def analyze_dependencies(
    client: GitHubClient,
    owner: str,
    repo: str,
    limits: SampleLimits | None = None,
) -> DependencyGraphReport:
    """Dependency graph of the first supported manifest on the default branch."""
    limits = limits or get_sample_limits()
    base = _repo_path(owner, repo)
    branch = parse_repository(client.get_json(base)).default_branch
    manifest = find_manifest(client, base, branch)
    return build_dependency_report(
        manifest, sanitize_repo_name(repo), max_nodes=limits.dependency_nodes
    )


def _fetch_repository_activity(
    client: GitHubClient, full_name: str, limits: SampleLimits
) -> RepositoryActivity:
    base = f"/repos/{full_name}"
    contributors = [
        contributor
        for contributor in map(
            parse_contributor,
            _as_list(
                _fetch_or_default(
                    lambda: client.get_json(
                        f"{base}/contributors?per_page={COLLABORATION_PAGE_SIZE}"
                    ),
                    [],
                    f"contributors of {full_name}",
                )
            ),
        )
        if contributor is not None
    ]
    pr_list = _as_list(
        _fetch_or_default(
            lambda: client.get_json(
                f"{base}/pulls?state=all&per_page={COLLABORATION_PAGE_SIZE}&sort=updated"
            ),
            [],
            f"pull requests of {full_name}",
        )
    )
    prs = [
        _fetch_pr_with_reviews(client, base, pr)
        for pr in pr_list[: limits.collaboration_prs_per_repo]
    ]
    return RepositoryActivity(full_name=full_name, contributors=contributors, pull_requests=prs)


def analyze_collaborations(
    client: GitHubClient, username: str, limits: SampleLimits | None = None
) -> CollaborationNetwork:
    """
    Collaboration network across a user's or organization's latest repositories.
    """
    limits = limits or get_sample_limits()
    login = sanitize_owner(username)
    profile = client.get_json(f"/users/{login}")
    kind = "orgs" if isinstance(profile, dict) and profile.get("type") == "Organization" else "users"
    repos = _as_list(client.get_json(f"/{kind}/{login}/repos?per_page=100&sort=updated"))
    if not repos:
        return EMPTY_NETWORK

    activities = []
    for repo in repos[: limits.collaboration_repos]:
        if not isinstance(repo, dict):
            continue
        name = repo.get("name") or ""
        full_name = repo.get("full_name") or f"{login}/{name}"
        activities.append(_fetch_repository_activity(client, full_name, limits))

    return build_collaboration_network(activities)


def _calendar_days(data: dict[str, Any]) -> list[ContributionDay] | None:
    user = data.get("user") or {}
    collection = user.get("contributionsCollection")
    if not collection:
        return None
    days = []
    for week in collection.get("contributionCalendar", {}).get("weeks", []):
        for day in week.get("contributionDays", []):
            days.append(ContributionDay(day["date"], int(day.get("contributionCount", 0))))
    return days


def _public_event_days(client: GitHubClient, login: str) -> list[ContributionDay]:
    events = _as_list(
        _fetch_or_default(
            lambda: client.get_json(f"/users/{login}/events/public?per_page=100"),
            [],
            f"public events of {login}",
        )
    )
    moments = [
        moment
        for moment in (
            parse_timestamp(event.get("created_at"))
            for event in events
            if isinstance(event, dict)
        )
        if moment is not None
    ]
    return aggregate_contributions_by_date(moments, [])


def calendar_span(start: date, end: date) -> tuple[datetime, datetime]:
    """
    GraphQL bounds for a heatmap window.

    GitHub rejects contribution ranges longer than one year, so the end is
    capped at exactly one year after the start.
    """
    span_start = datetime.combine(start, time.min, timezone.utc)
    span_end = datetime.combine(end, time.max, timezone.utc)
    try:
        limit = span_start.replace(year=span_start.year + 1)
    except ValueError:
        # Feb 29
        limit = span_start.replace(year=span_start.year + 1, day=28)
    return span_start, min(span_end, limit)


def analyze_contributions(
    client: GitHubClient,
    username: str,
    year: int | None = None,
    today: date | None = None,
) -> ContributionHeatmap:
    """
    Daily contribution heatmap for a user.

    Uses the GraphQL contribution calendar when a token is configured and
    falls back to the public events feed, which only covers recent activity.

    Raises:
        ValueError: If ``year`` is before 2000 or in the future.
    """
    login = sanitize_owner(username)
    today = today or datetime.now(timezone.utc).date()
    if year is not None and not MIN_HEATMAP_YEAR <= year <= today.year:
        raise ValueError(f"Invalid year: {year}")

    days = None
    if client.is_authenticated:
        span_start, span_end = calendar_span(*heatmap_window(year, today))
        variables = {
            "username": login,
            "from": span_start.isoformat(),
            "to": span_end.isoformat(),
        }
        data = _fetch_or_default(
            lambda: client.post_graphql(CONTRIBUTION_CALENDAR_QUERY, variables),
            {},
            f"contribution calendar of {login}",
        )
        days = _calendar_days(data)

    if days is None:
        days = _public_event_days(client, login)

    return format_contribution_data(days, year=year, today=today)
