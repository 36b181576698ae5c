"""Tests for code quality metrics and recommendations."""

from datetime import datetime, timedelta, timezone

from repo_pulse.dependency_parsers import parse_requirements_txt
from repo_pulse.metrics.code_quality import (
    ALL_GOOD_MESSAGE,
    build_code_quality_metrics,
    generate_code_quality_recommendations,
)
from repo_pulse.metrics.dependency_health import DependencyHealth, EcosystemHealth
from repo_pulse.models import CommitStat, DiffStats, PullRequestRecord, ReviewRecord

NOW = datetime(2024, 4, 1, tzinfo=timezone.utc)
T0 = datetime(2024, 3, 1, tzinfo=timezone.utc)


def make_health(total, outdated):
    return DependencyHealth(
        total=total,
        outdated=outdated,
        vulnerable=0,
        latest=total - outdated,
        ecosystems={"npm": EcosystemHealth(total, outdated)},
    )


class TestCodeQualityRecommendations:
    """Test recommendation tiers."""

    def test_all_good(self):
        assert generate_code_quality_recommendations(
            10, make_health(10, 0), 100
        ) == [ALL_GOOD_MESSAGE]

    def test_review_time_tiers(self):
        very_high = generate_code_quality_recommendations(80, None, None)
        assert very_high == [
            "PR review time is very high (80.0h). Consider setting review SLAs "
            "or automating review assignments."
        ]
        high = generate_code_quality_recommendations(50.25, None, None)
        assert high == [
            "Consider improving PR review turnaround time (currently 50.3 hours). "
            "Aim for < 24 hours."
        ]
        good = generate_code_quality_recommendations(30, None, None)
        assert good == ["PR review time is good but could be improved (currently 30.0 hours)."]

    def test_zero_review_time_means_no_data(self):
        assert generate_code_quality_recommendations(0, None, 0) == [ALL_GOOD_MESSAGE]

    def test_dependency_tiers(self):
        assert generate_code_quality_recommendations(None, make_health(0, 0), None) == [
            "Consider adding dependency management for better project organization"
        ]
        assert generate_code_quality_recommendations(None, make_health(4, 3), None) == [
            "High percentage of outdated dependencies (75%). Prioritize security updates."
        ]
        assert generate_code_quality_recommendations(None, make_health(10, 4), None) == [
            "Update outdated dependencies (4/10) to improve security and compatibility"
        ]
        assert generate_code_quality_recommendations(None, make_health(10, 2), None) == [
            "Some dependencies may need updates (2/10 outdated)"
        ]

    def test_churn_tiers(self):
        assert "Very large commits" in generate_code_quality_recommendations(None, None, 1200)[0]
        assert "Large commits detected (avg 600 lines)" in generate_code_quality_recommendations(
            None, None, 600
        )[0]
        assert generate_code_quality_recommendations(None, None, 4) == [
            "Very small commits (avg 4 lines). Consider batching related changes together."
        ]


def test_build_code_quality_metrics():
    """Test review times, churn and dependencies are combined."""
    prs = [
        PullRequestRecord(
            number=1,
            created_at=T0,
            merged_at=None,
            state="closed",
            reviews=(ReviewRecord("rev", T0 + timedelta(hours=30.25), "APPROVED"),),
        )
    ]
    commits = [
        CommitStat("a", T0, "feat: add parser", DiffStats(40, 10, 50)),
        CommitStat("b", T0, "Merge branch 'main'", DiffStats(500, 500, 1000)),
    ]
    manifest = parse_requirements_txt("flask==2.0.1\nrequests>=2.0\n")

    result = build_code_quality_metrics(prs, commits, manifest, now=NOW)

    assert result.average_pr_review_time == 30.3
    assert result.median_pr_review_time == 30.3
    assert result.average_churn_per_commit == 50
    assert result.dependency_health.total == 2
    assert result.recommendations == [
        "PR review time is good but could be improved (currently 30.3 hours).",
        "Update outdated dependencies (1/2) to improve security and compatibility",
    ]

    data = result.to_dict()
    assert data["lastCalculated"] == "2024-04-01T00:00:00Z"
    assert data["codeChurn"][0]["netChange"] == 30
    assert data["dependencyHealth"]["ecosystems"] == {"python": {"total": 2, "outdated": 1}}


def test_build_without_data():
    result = build_code_quality_metrics([], [], None, now=NOW)
    assert result.average_pr_review_time == 0.0
    assert result.code_churn == []
    assert result.recommendations == [
        "Consider adding dependency management for better project organization"
    ]
