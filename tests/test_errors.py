"""
Tests for error rendering and secret redaction.
"""

from repo_pulse.errors import (
    RATE_LIMIT_MESSAGE,
    REDACTED,
    GitHubApiError,
    describe_error,
    redact_secrets,
)

GITHUB_TOKEN = "ghp_" + "a" * 36
OAUTH_TOKEN = "gho_" + "B1" * 18
FINE_GRAINED_TOKEN = "github_pat_" + "x_" * 41
OPENAI_KEY = "sk-" + "k" * 40


class TestRedactSecrets:
    """Test credential redaction."""

    def test_all_token_kinds(self):
        text = f"{GITHUB_TOKEN} {OAUTH_TOKEN} {FINE_GRAINED_TOKEN} {OPENAI_KEY}"
        assert redact_secrets(text) == " ".join([REDACTED] * 4)

    def test_plain_text_untouched(self):
        text = "ghp_short and sk-tooshort stay as they are"
        assert redact_secrets(text) == text


class TestDescribeError:
    """Test user-facing error payloads."""

    def test_rate_limited_429(self):
        payload = describe_error(GitHubApiError(429, "Too many requests"))
        assert payload == {
            "error": RATE_LIMIT_MESSAGE,
            "status": 429,
            "retryAfter": "60",
        }

    def test_rate_limited_403(self):
        payload = describe_error(GitHubApiError(403, "Forbidden", {"message": "x"}))
        assert payload == {"error": RATE_LIMIT_MESSAGE, "status": 403}

    def test_details_are_redacted(self):
        error = GitHubApiError(
            401, "Bad credentials", {"message": f"token {GITHUB_TOKEN} rejected"}
        )
        payload = describe_error(error)
        assert payload["status"] == 401
        assert payload["error"] == "Bad credentials"
        assert payload["details"] == {"message": f"token {REDACTED} rejected"}
        assert GITHUB_TOKEN not in str(payload)

    def test_no_details(self):
        assert describe_error(GitHubApiError(404, "Not Found")) == {
            "error": "Not Found",
            "status": 404,
        }

    def test_other_exceptions_use_fallback(self):
        payload = describe_error(RuntimeError(GITHUB_TOKEN), "Failed to load metrics")
        assert payload == {"error": "Failed to load metrics", "status": 500}


def test_is_rate_limited():
    assert GitHubApiError(403, "x").is_rate_limited
    assert GitHubApiError(429, "x").is_rate_limited
    assert not GitHubApiError(500, "x").is_rate_limited
