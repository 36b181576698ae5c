"""
Tests for narrative prompt construction.
"""

from datetime import datetime, timezone

from repo_pulse.errors import REDACTED
from repo_pulse.metrics.health_score import HealthScoreInput, calculate_health_score
from repo_pulse.metrics.pr_analytics import EMPTY_PR_ANALYTICS
from repo_pulse.models import RepositoryMetadata
from repo_pulse.narrative import SYSTEM_PROMPT, build_messages, build_repository_prompt

REPO = RepositoryMetadata(
    full_name="octo/widgets",
    name="widgets",
    stargazers_count=42,
    forks_count=3,
    open_issues_count=7,
    license_name="MIT License",
    language="Python",
    topics=("a", "b", "c", "d", "e", "f", "g"),
)


def test_prompt_sections():
    health = calculate_health_score(
        HealthScoreInput(repo=REPO, has_license=True),
        now=datetime(2024, 6, 1, tzinfo=timezone.utc),
    )
    prompt = build_repository_prompt(
        "octo/widgets", health=health, analytics=EMPTY_PR_ANALYTICS, repo=REPO
    )

    assert prompt.startswith("Repository: octo/widgets\n")
    assert "Primary language: Python" in prompt
    assert "Topics: a, b, c, d, e, f\n" in prompt
    assert "Stats: 42 stars, 3 forks, 7 open issues" in prompt
    assert f"Health score: {health.overall}/100" in prompt
    assert "- Set up CI/CD to ensure code quality" in prompt
    assert "Pull requests: 0 total" in prompt
    assert "PR review time" not in prompt
    assert "Merge times" not in prompt


def test_prompt_redacts_tokens():
    token = "ghp_" + "Z" * 36
    repo = REPO._replace(description=f"Deploy with {token}")
    prompt = build_repository_prompt("octo/widgets", repo=repo)
    assert token not in prompt
    assert f"Description: Deploy with {REDACTED}" in prompt


def test_build_messages():
    messages = build_messages("hello")
    assert messages == [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": "hello"},
    ]
