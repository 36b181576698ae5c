"""
Tests for payload narrowing.
"""

from datetime import datetime, timezone

from repo_pulse.models import (
    DiffStats,
    parse_commit,
    parse_contributor,
    parse_issue,
    parse_pull_request,
    parse_repository,
)


def test_parse_pull_request_with_separate_reviews():
    payload = {
        "number": 7,
        "state": "closed",
        "created_at": "2024-01-01T00:00:00Z",
        "merged_at": "2024-01-02T12:00:00Z",
        "user": {"login": "alice"},
        "additions": 10,
        "deletions": 4,
    }
    reviews = [
        {"user": {"login": "bob"}, "submitted_at": "2024-01-01T05:00:00Z", "state": "APPROVED"},
        {"user": None, "submitted_at": None, "state": "COMMENTED"},
    ]
    pr = parse_pull_request(payload, reviews)

    assert pr.number == 7
    assert pr.author_login == "alice"
    assert pr.merged_at == datetime(2024, 1, 2, 12, tzinfo=timezone.utc)
    assert pr.additions == 10
    assert pr.deletions == 4
    assert pr.reviews[0].reviewer_login == "bob"
    assert pr.reviews[0].state == "APPROVED"
    assert pr.reviews[1].reviewer_login is None
    assert pr.reviews[1].submitted_at is None


def test_parse_pull_request_is_lenient():
    """Test malformed payloads narrow to defaults instead of raising."""
    pr = parse_pull_request({"created_at": "not a date", "reviews": "nope"})
    assert pr.number == 0
    assert pr.created_at is None
    assert pr.reviews == ()
    assert parse_pull_request(None).state == ""


def test_parse_pull_request_embedded_reviews():
    pr = parse_pull_request({"reviews": [{"user": {"login": "carol"}}]})
    assert [review.reviewer_login for review in pr.reviews] == ["carol"]


def test_parse_commit_stats():
    commit = parse_commit(
        {
            "sha": "abc",
            "commit": {"author": {"date": "2024-03-01T10:00:00Z"}, "message": "Fix"},
            "stats": {"additions": 3, "deletions": 2},
        }
    )
    assert commit.sha == "abc"
    assert commit.message == "Fix"
    assert commit.stats == DiffStats(additions=3, deletions=2, total=5)


def test_parse_commit_without_stats():
    commit = parse_commit({"sha": "abc", "commit": {}})
    assert commit.stats is None
    assert commit.author_date is None


def test_parse_issue():
    issue = parse_issue({"created_at": "2024-01-01T00:00:00Z", "closed_at": None})
    assert issue.created_at is not None
    assert issue.closed_at is None


def test_parse_contributor():
    assert parse_contributor({"type": "Anonymous", "contributions": 3}) is None
    contributor = parse_contributor({"login": "dave", "contributions": 12})
    assert contributor.avatar_url == "https://github.com/dave.png"
    assert contributor.contributions == 12


def test_parse_repository():
    repo = parse_repository(
        {
            "full_name": "octo/widgets",
            "name": "widgets",
            "stargazers_count": 150,
            "forks_count": 12,
            "open_issues_count": 4,
            "default_branch": "develop",
            "has_wiki": True,
            "license": {"name": "MIT License", "spdx_id": "MIT"},
            "topics": ["cli", 3, "github"],
            "homepage": "",
        }
    )
    assert repo.full_name == "octo/widgets"
    assert repo.default_branch == "develop"
    assert repo.has_wiki is True
    assert repo.has_pages is False
    assert repo.license_name == "MIT License"
    assert repo.topics == ("cli", "github")
    assert repo.homepage is None


def test_parse_repository_defaults():
    repo = parse_repository({})
    assert repo.default_branch == "main"
    assert repo.license_name is None
    assert repo.stargazers_count == 0
