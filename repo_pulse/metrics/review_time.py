"""PR review time statistics."""

from typing import NamedTuple

from repo_pulse.metrics.base import hours_between, iqr_filter, mean, median
from repo_pulse.models import PullRequestRecord, ReviewRecord

REVIEW_WINDOW_HOURS = 720  # 30 days
IQR_MULTIPLIER = 1.5


class ReviewTimeStats(NamedTuple):
    """Review turnaround in hours."""

    average: float
    median: float


class ReviewSamples(NamedTuple):
    """Per-PR hours to the first review of any kind and to the first approval."""

    first_review: list[float]
    first_approval: list[float]


def _within_window(hours: float, window_hours: float) -> bool:
    return 0 < hours < window_hours


def _sorted_reviews(pr: PullRequestRecord) -> list[ReviewRecord]:
    timed = [review for review in pr.reviews if review.submitted_at is not None]
    return sorted(timed, key=lambda review: review.submitted_at)


def collect_review_samples(
    prs: list[PullRequestRecord], window_hours: float = REVIEW_WINDOW_HOURS
) -> ReviewSamples:
    """
    Collect hours-to-first-review and hours-to-first-approval per PR.

    Both samples are built independently. A value is kept only when it falls
    strictly between 0 and ``window_hours``; PRs without a creation time or
    without timestamped reviews contribute nothing.
    """
    first_review: list[float] = []
    first_approval: list[float] = []

    for pr in prs:
        if pr.created_at is None:
            continue
        reviews = _sorted_reviews(pr)
        if not reviews:
            continue

        hours = hours_between(pr.created_at, reviews[0].submitted_at)
        if _within_window(hours, window_hours):
            first_review.append(hours)

        approved = next(
            (review for review in reviews if review.state == "APPROVED"), None
        )
        if approved is not None:
            hours = hours_between(pr.created_at, approved.submitted_at)
            if _within_window(hours, window_hours):
                first_approval.append(hours)

    return ReviewSamples(first_review=first_review, first_approval=first_approval)


def calculate_review_times(
    prs: list[PullRequestRecord],
    window_hours: float = REVIEW_WINDOW_HOURS,
    iqr_multiplier: float = IQR_MULTIPLIER,
) -> ReviewTimeStats:
    """
    Average and median time to review across a PR sample.

    The approval sample is used whenever it is non-empty, otherwise the
    first-review sample. The median is taken over the chosen sample as is;
    the average is taken after IQR outlier filtering, falling back to the
    unfiltered sample if filtering leaves nothing.

    Returns:
        ReviewTimeStats, (0.0, 0.0) when no PR has a usable review.
    """
    samples = collect_review_samples(prs, window_hours=window_hours)
    times = samples.first_approval or samples.first_review

    if not times:
        return ReviewTimeStats(average=0.0, median=0.0)

    filtered = iqr_filter(times, multiplier=iqr_multiplier)
    average = mean(filtered) if filtered else mean(times)

    return ReviewTimeStats(average=average, median=median(times))
