"""Code churn metric."""

from typing import NamedTuple

from repo_pulse.metrics.base import round_half_up, utc_date_key
from repo_pulse.models import CommitStat

MIN_MEANINGFUL_CHANGE = 5
MERGE_DELETION_RATIO = 2
MERGE_MIN_TOTAL = 100
DEFAULT_MAX_DAYS = 30


class ChurnDay(NamedTuple):
    """Line changes of one UTC calendar day."""

    date: str  # YYYY-MM-DD
    additions: int
    deletions: int
    net_change: int
    commits: int

    def to_dict(self) -> dict[str, object]:
        return {
            "date": self.date,
            "additions": self.additions,
            "deletions": self.deletions,
            "netChange": self.net_change,
            "commits": self.commits,
        }


class CodeChurnResult(NamedTuple):
    churn_data: list[ChurnDay]
    average_churn_per_commit: int


def is_merge_commit(commit: CommitStat) -> bool:
    """
    Heuristic merge-commit detection.

    A message starting with "merge" (any case), or a diff that deletes more
    than twice what it adds while touching over 100 lines.
    """
    if commit.message.lower().startswith("merge"):
        return True
    stats = commit.stats
    if stats is None:
        return False
    return (
        stats.deletions > stats.additions * MERGE_DELETION_RATIO
        and stats.total > MERGE_MIN_TOTAL
    )


def filter_meaningful_commits(commits: list[CommitStat]) -> list[CommitStat]:
    """Drop commits without stats, merge commits and changes under 5 lines."""
    return [
        commit
        for commit in commits
        if commit.stats is not None
        and not is_merge_commit(commit)
        and commit.stats.total >= MIN_MEANINGFUL_CHANGE
    ]


def calculate_code_churn(
    commits: list[CommitStat], max_days: int = DEFAULT_MAX_DAYS
) -> CodeChurnResult:
    """
    Aggregate line churn per UTC day from commit stats.

    The series holds the last ``max_days`` days present in the data, not the
    last ``max_days`` days of wall-clock time, so it can be sparse.

    Args:
        commits: Commits with optional stats.
        max_days: Number of most recent days to keep.

    Returns:
        CodeChurnResult with the ascending daily series and the rounded
        average churn (additions + deletions) per meaningful commit.
    """
    meaningful = filter_meaningful_commits(commits)
    by_date: dict[str, list[int]] = {}

    for commit in meaningful:
        if commit.author_date is None:
            continue
        day = by_date.setdefault(utc_date_key(commit.author_date), [0, 0, 0])
        day[0] += commit.stats.additions
        day[1] += commit.stats.deletions
        day[2] += 1

    churn_data = [
        ChurnDay(
            date=date,
            additions=additions,
            deletions=deletions,
            net_change=additions - deletions,
            commits=count,
        )
        for date, (additions, deletions, count) in sorted(by_date.items())
    ]
    if max_days > 0:
        churn_data = churn_data[-max_days:]

    total_churn = sum(commit.stats.total for commit in meaningful)
    average = round_half_up(total_churn / len(meaningful)) if meaningful else 0

    return CodeChurnResult(churn_data=churn_data, average_churn_per_commit=average)
