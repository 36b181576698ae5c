"""
PR analytics aggregation.

Summarizes a repository's pull requests: merge time distribution, size mix,
review turnaround, most active reviewers and merge success rate.
"""

import math
from collections import Counter
from typing import NamedTuple

from repo_pulse.metrics.base import hours_between, mean, round_one
from repo_pulse.metrics.review_time import REVIEW_WINDOW_HOURS
from repo_pulse.models import PullRequestRecord

# (label, inclusive lower bound, exclusive upper bound) in hours
MERGE_TIME_BUCKETS = (
    ("0-24h", 0, 24),
    ("1-7d", 24, 168),
    ("1-4w", 168, 672),
    ("1-3m", 672, 2160),
    ("3m+", 2160, math.inf),
)
SMALL_PR_MAX_LINES = 100
MEDIUM_PR_MAX_LINES = 500
TOP_REVIEWERS = 10


class MergeTimeBucket(NamedTuple):
    range: str
    count: int


class PRSizeAnalysis(NamedTuple):
    small: int = 0
    medium: int = 0
    large: int = 0


class ActiveReviewer(NamedTuple):
    login: str
    reviews: int


class PRAnalytics(NamedTuple):
    merge_time_distribution: list[MergeTimeBucket]
    average_review_turnaround_time: float
    pr_size_analysis: PRSizeAnalysis
    active_reviewers: list[ActiveReviewer]
    success_rate: float
    total_prs: int
    merged_prs: int
    closed_prs: int
    open_prs: int

    def to_dict(self) -> dict[str, object]:
        return {
            "mergeTimeDistribution": [
                bucket._asdict() for bucket in self.merge_time_distribution
            ],
            "averageReviewTurnaroundTime": self.average_review_turnaround_time,
            "prSizeAnalysis": self.pr_size_analysis._asdict(),
            "activeReviewers": [
                reviewer._asdict() for reviewer in self.active_reviewers
            ],
            "successRate": self.success_rate,
            "totalPRs": self.total_prs,
            "mergedPRs": self.merged_prs,
            "closedPRs": self.closed_prs,
            "openPRs": self.open_prs,
        }


EMPTY_PR_ANALYTICS = PRAnalytics(
    merge_time_distribution=[],
    average_review_turnaround_time=0.0,
    pr_size_analysis=PRSizeAnalysis(),
    active_reviewers=[],
    success_rate=0.0,
    total_prs=0,
    merged_prs=0,
    closed_prs=0,
    open_prs=0,
)


def classify_pr_size(additions: int, deletions: int) -> str:
    total = additions + deletions
    if total < SMALL_PR_MAX_LINES:
        return "small"
    if total < MEDIUM_PR_MAX_LINES:
        return "medium"
    return "large"


def merge_time_distribution(
    details: list[PullRequestRecord],
    buckets: tuple[tuple[str, float, float], ...] = MERGE_TIME_BUCKETS,
) -> list[MergeTimeBucket]:
    """Count merged PRs per merge-time bucket; every bucket is always listed."""
    merge_times = [
        hours_between(pr.created_at, pr.merged_at)
        for pr in details
        if pr.created_at is not None and pr.merged_at is not None
    ]
    return [
        MergeTimeBucket(
            range=label,
            count=sum(1 for hours in merge_times if lower <= hours < upper),
        )
        for label, lower, upper in buckets
    ]


def pr_size_analysis(details: list[PullRequestRecord]) -> PRSizeAnalysis:
    sizes = Counter(classify_pr_size(pr.additions, pr.deletions) for pr in details)
    return PRSizeAnalysis(
        small=sizes["small"], medium=sizes["medium"], large=sizes["large"]
    )


def average_review_turnaround(
    details: list[PullRequestRecord], window_hours: float = REVIEW_WINDOW_HOURS
) -> float:
    """Mean hours from PR creation to its first review, within the window."""
    review_times: list[float] = []
    for pr in details:
        if pr.created_at is None:
            continue
        submitted = sorted(
            review.submitted_at
            for review in pr.reviews
            if review.submitted_at is not None
        )
        if not submitted:
            continue
        hours = hours_between(pr.created_at, submitted[0])
        if 0 < hours < window_hours:
            review_times.append(hours)
    return mean(review_times)


def active_reviewers(
    details: list[PullRequestRecord], limit: int = TOP_REVIEWERS
) -> list[ActiveReviewer]:
    """Reviewers ranked by review count; ties keep first-seen order."""
    counts: dict[str, int] = {}
    for pr in details:
        for review in pr.reviews:
            if review.reviewer_login:
                counts[review.reviewer_login] = counts.get(review.reviewer_login, 0) + 1
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [ActiveReviewer(login=login, reviews=reviews) for login, reviews in ranked[:limit]]


def compute_pr_analytics(
    prs: list[PullRequestRecord], details: list[PullRequestRecord]
) -> PRAnalytics:
    """
    Aggregate PR analytics.

    Args:
        prs: Every PR in the listing; drives the state counters and success rate.
        details: The detailed sample (with sizes and reviews); drives the
            distribution, size mix, turnaround and reviewer ranking.

    Returns:
        PRAnalytics; EMPTY_PR_ANALYTICS when ``prs`` is empty.
    """
    if not prs:
        return EMPTY_PR_ANALYTICS

    total = len(prs)
    merged = sum(1 for pr in prs if pr.merged_at is not None)
    closed = sum(1 for pr in prs if pr.state == "closed" and pr.merged_at is None)
    opened = sum(1 for pr in prs if pr.state == "open")

    return PRAnalytics(
        merge_time_distribution=merge_time_distribution(details),
        average_review_turnaround_time=round_one(average_review_turnaround(details)),
        pr_size_analysis=pr_size_analysis(details),
        active_reviewers=active_reviewers(details),
        success_rate=round_one(merged / total * 100),
        total_prs=total,
        merged_prs=merged,
        closed_prs=closed,
        open_prs=opened,
    )
