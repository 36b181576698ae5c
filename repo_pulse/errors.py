"""Errors raised by the GitHub fetch layer and their user-facing rendering."""

import json
import re
from typing import Any

RATE_LIMIT_MESSAGE = (
    "Rate limit exceeded. Please try again later or add a GitHub token for "
    "higher limits."
)
RATE_LIMIT_RETRY_AFTER = "60"

REDACTED = "[REDACTED]"
_SECRET_PATTERNS = (
    re.compile(r"ghp_[a-zA-Z0-9]{36}"),
    re.compile(r"gho_[a-zA-Z0-9]{36}"),
    re.compile(r"github_pat_[a-zA-Z0-9_]{82}"),
    re.compile(r"sk-[a-zA-Z0-9]{32,}"),
)


class GitHubApiError(Exception):
    """A GitHub API request that failed after retries."""

    def __init__(self, status: int, message: str, details: Any = None):
        super().__init__(message)
        self.status = status
        self.message = message
        self.details = details

    @property
    def is_rate_limited(self) -> bool:
        return self.status in (403, 429)


def redact_secrets(text: str) -> str:
    """Replace GitHub and OpenAI tokens in ``text`` with a placeholder."""
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(REDACTED, text)
    return text


def _redact_details(details: Any) -> Any:
    if details is None or details == "":
        return None
    serialized = json.dumps(details, default=str)
    try:
        return json.loads(redact_secrets(serialized))
    except json.JSONDecodeError:
        return {"message": "Error details unavailable"}


def describe_error(
    error: Exception, fallback_message: str = "GitHub request failed."
) -> dict[str, Any]:
    """
    Build a user-facing error payload that never exposes credentials.

    Args:
        error: The exception caught by the caller.
        fallback_message: Message used for anything that is not a GitHubApiError.

    Returns:
        Dict with ``error`` and ``status`` keys, plus ``retryAfter`` for 429
        responses or redacted ``details`` for other API errors.
    """
    if not isinstance(error, GitHubApiError):
        return {"error": fallback_message, "status": 500}

    if error.is_rate_limited:
        payload: dict[str, Any] = {"error": RATE_LIMIT_MESSAGE, "status": error.status}
        if error.status == 429:
            payload["retryAfter"] = RATE_LIMIT_RETRY_AFTER
        return payload

    payload = {"error": error.message, "status": error.status}
    details = _redact_details(error.details)
    if details is not None:
        payload["details"] = details
    return payload
