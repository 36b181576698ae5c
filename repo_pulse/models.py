"""
Typed records narrowed from GitHub REST API payloads.

The metric functions never look at raw JSON. Everything they consume is built
here, once, at the ingestion boundary. Narrowing is lenient: missing keys and
unparseable timestamps become ``None`` or zero instead of raising, so a single
malformed item never fails a whole batch.
"""

from datetime import datetime
from typing import Any, NamedTuple

from repo_pulse.metrics.base import parse_timestamp


class ReviewRecord(NamedTuple):
    """A submitted pull request review."""

    reviewer_login: str | None
    submitted_at: datetime | None
    state: str  # "APPROVED", "COMMENTED", "CHANGES_REQUESTED", ...


class PullRequestRecord(NamedTuple):
    """A pull request, optionally enriched with detail and review data."""

    number: int
    created_at: datetime | None
    merged_at: datetime | None
    state: str  # "open" or "closed"
    author_login: str | None = None
    additions: int = 0
    deletions: int = 0
    reviews: tuple[ReviewRecord, ...] = ()


class DiffStats(NamedTuple):
    """Line counts of a single commit."""

    additions: int
    deletions: int
    total: int


class CommitStat(NamedTuple):
    """A commit with its optional diff statistics."""

    sha: str
    author_date: datetime | None
    message: str
    stats: DiffStats | None = None


class IssueRecord(NamedTuple):
    """An entry of the issues endpoint (which also lists pull requests)."""

    created_at: datetime | None
    closed_at: datetime | None


class Contributor(NamedTuple):
    """An entry of the repository contributors endpoint."""

    login: str
    avatar_url: str
    contributions: int


class RepositoryMetadata(NamedTuple):
    """The subset of repository metadata used for scoring."""

    full_name: str
    name: str
    stargazers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0
    default_branch: str = "main"
    has_wiki: bool = False
    has_pages: bool = False
    allow_forking: bool = False
    license_name: str | None = None
    description: str | None = None
    language: str | None = None
    homepage: str | None = None
    topics: tuple[str, ...] = ()


def _as_dict(payload: Any) -> dict[str, Any]:
    return payload if isinstance(payload, dict) else {}


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    return 0


def _login(user: Any) -> str | None:
    login = _as_dict(user).get("login")
    return login if isinstance(login, str) and login else None


def parse_review(payload: Any) -> ReviewRecord:
    """Narrow a ``/pulls/{n}/reviews`` entry."""
    data = _as_dict(payload)
    return ReviewRecord(
        reviewer_login=_login(data.get("user")),
        submitted_at=parse_timestamp(data.get("submitted_at")),
        state=str(data.get("state") or ""),
    )


def parse_pull_request(
    payload: Any, reviews: list[Any] | None = None
) -> PullRequestRecord:
    """
    Narrow a pull request list or detail payload.

    Args:
        payload: A ``/pulls`` list entry or ``/pulls/{n}`` detail object.
        reviews: Raw review payloads fetched separately. Falls back to a
            ``reviews`` key on the payload itself when not given.

    Returns:
        PullRequestRecord with reviews narrowed as well.
    """
    data = _as_dict(payload)
    raw_reviews = reviews if reviews is not None else data.get("reviews")
    if not isinstance(raw_reviews, list):
        raw_reviews = []
    return PullRequestRecord(
        number=_as_int(data.get("number")),
        created_at=parse_timestamp(data.get("created_at")),
        merged_at=parse_timestamp(data.get("merged_at")),
        state=str(data.get("state") or ""),
        author_login=_login(data.get("user")),
        additions=_as_int(data.get("additions")),
        deletions=_as_int(data.get("deletions")),
        reviews=tuple(parse_review(review) for review in raw_reviews),
    )


def parse_commit(payload: Any) -> CommitStat:
    """Narrow a ``/commits`` list entry or ``/commits/{sha}`` detail object."""
    data = _as_dict(payload)
    commit = _as_dict(data.get("commit"))
    author = _as_dict(commit.get("author"))

    stats = None
    raw_stats = data.get("stats")
    if isinstance(raw_stats, dict):
        additions = _as_int(raw_stats.get("additions"))
        deletions = _as_int(raw_stats.get("deletions"))
        total = raw_stats.get("total")
        stats = DiffStats(
            additions=additions,
            deletions=deletions,
            total=_as_int(total) if total is not None else additions + deletions,
        )

    return CommitStat(
        sha=str(data.get("sha") or ""),
        author_date=parse_timestamp(author.get("date")),
        message=str(commit.get("message") or ""),
        stats=stats,
    )


def parse_issue(payload: Any) -> IssueRecord:
    data = _as_dict(payload)
    return IssueRecord(
        created_at=parse_timestamp(data.get("created_at")),
        closed_at=parse_timestamp(data.get("closed_at")),
    )


def parse_contributor(payload: Any) -> Contributor | None:
    """Narrow a contributor entry; anonymous entries without a login give None."""
    data = _as_dict(payload)
    login = data.get("login")
    if not isinstance(login, str) or not login:
        return None
    avatar_url = data.get("avatar_url")
    return Contributor(
        login=login,
        avatar_url=avatar_url
        if isinstance(avatar_url, str) and avatar_url
        else f"https://github.com/{login}.png",
        contributions=_as_int(data.get("contributions")),
    )


def parse_repository(payload: Any) -> RepositoryMetadata:
    """Narrow a ``/repos/{owner}/{repo}`` payload."""
    data = _as_dict(payload)
    license_data = data.get("license")
    license_name = None
    if isinstance(license_data, dict):
        license_name = license_data.get("name") or license_data.get("spdx_id")
    topics = data.get("topics")
    name = str(data.get("name") or "")
    return RepositoryMetadata(
        full_name=str(data.get("full_name") or name),
        name=name,
        stargazers_count=_as_int(data.get("stargazers_count")),
        forks_count=_as_int(data.get("forks_count")),
        open_issues_count=_as_int(data.get("open_issues_count")),
        default_branch=str(data.get("default_branch") or "main"),
        has_wiki=bool(data.get("has_wiki", False)),
        has_pages=bool(data.get("has_pages", False)),
        allow_forking=bool(data.get("allow_forking", False)),
        license_name=license_name,
        description=data.get("description"),
        language=data.get("language"),
        homepage=data.get("homepage") or None,
        topics=tuple(t for t in topics if isinstance(t, str))
        if isinstance(topics, list)
        else (),
    )
