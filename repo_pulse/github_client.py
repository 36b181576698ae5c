"""
GitHub REST API client.

Thin wrapper over the shared httpx client: default headers, optional bearer
token, and a short retry loop for rate-limit and server errors.
"""

import base64
import logging
import re
import time
from typing import Any

import httpx

from repo_pulse.config import get_api_base_url, get_github_token
from repo_pulse.errors import GitHubApiError
from repo_pulse.http_client import _get_http_client

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "application/vnd.github+json",
    "X-GitHub-Api-Version": "2022-11-28",
}
RETRY_STATUS = frozenset({429, 500, 502, 503, 504})
MAX_RETRIES = 2
RETRY_BACKOFF_SECONDS = 0.4

MAX_OWNER_LENGTH = 39
MAX_REPO_NAME_LENGTH = 100


def sanitize_owner(owner: str) -> str:
    """
    Strip characters GitHub does not allow in user and organization names.

    Raises:
        ValueError: If nothing valid remains or the name is too long.
    """
    sanitized = re.sub(r"[^a-zA-Z0-9-]", "", (owner or "").strip())
    if not sanitized or len(sanitized) > MAX_OWNER_LENGTH:
        raise ValueError(f"Invalid owner or username format: {owner!r}")
    return sanitized


def sanitize_repo_name(repo: str) -> str:
    """
    Strip characters GitHub does not allow in repository names.

    Raises:
        ValueError: If nothing valid remains or the name is too long.
    """
    sanitized = re.sub(r"[^a-zA-Z0-9._-]", "", (repo or "").strip())
    if not sanitized or len(sanitized) > MAX_REPO_NAME_LENGTH:
        raise ValueError(f"Invalid repository name format: {repo!r}")
    return sanitized


def split_repo_slug(slug: str) -> tuple[str, str]:
    """
    Split and sanitize an ``owner/repo`` argument.

    Raises:
        ValueError: If the slug is not of the form ``owner/repo``.
    """
    parts = (slug or "").strip().strip("/").split("/")
    if len(parts) != 2:
        raise ValueError(f"Expected OWNER/REPO, got {slug!r}")
    return sanitize_owner(parts[0]), sanitize_repo_name(parts[1])


def _error_details(response: httpx.Response) -> Any:
    content_type = response.headers.get("content-type", "")
    try:
        if "application/json" in content_type:
            return response.json()
        return response.text
    except ValueError as e:
        return {"error": "Failed to parse error response", "details": str(e)}


class GitHubClient:
    """Synchronous GitHub REST client."""

    def __init__(self, token: str | None = None, base_url: str | None = None):
        """
        Initialize the client.

        Args:
            token: GitHub token. If not provided, reads from the GITHUB_TOKEN
                environment variable; without any token requests are
                unauthenticated.
            base_url: API root. Defaults to the configured API URL.
        """
        self.token = token if token is not None else get_github_token()
        self.base_url = (base_url or get_api_base_url()).rstrip("/")

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def _headers(self, accept: str | None = None) -> dict[str, str]:
        headers = dict(DEFAULT_HEADERS)
        if accept:
            headers["Accept"] = accept
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        *,
        accept: str | None = None,
        json_body: Any = None,
        retries: int = MAX_RETRIES,
    ) -> httpx.Response:
        """
        Send a request, retrying rate-limit and server errors.

        The last response is returned whatever its status; callers decide
        how to treat failures.
        """
        client = _get_http_client()
        url = self._url(path)
        for attempt in range(retries + 1):
            response = client.request(
                method, url, headers=self._headers(accept), json=json_body
            )
            if (
                response.is_success
                or response.status_code not in RETRY_STATUS
                or attempt == retries
            ):
                return response
            delay = RETRY_BACKOFF_SECONDS * (attempt + 1)
            logger.debug(
                "GitHub returned %s for %s, retrying in %.1fs",
                response.status_code,
                path,
                delay,
            )
            time.sleep(delay)
        return response

    def _raise_for_status(self, response: httpx.Response) -> None:
        if not response.is_success:
            raise GitHubApiError(
                response.status_code,
                "GitHub API request failed.",
                _error_details(response),
            )

    def get_json(self, path: str) -> Any:
        """
        GET a JSON resource.

        Raises:
            GitHubApiError: If the final response is not successful.
        """
        response = self.request("GET", path)
        self._raise_for_status(response)
        return response.json()

    def get_maybe_json(self, path: str) -> Any | None:
        """
        GET a JSON resource that may not exist.

        Returns:
            Decoded JSON, or None on 404.

        Raises:
            GitHubApiError: For any other unsuccessful response.
        """
        response = self.request("GET", path)
        if response.status_code == 404:
            return None
        self._raise_for_status(response)
        return response.json()

    def get_file_text(self, path: str) -> str | None:
        """
        Fetch and decode a ``/contents`` file.

        Returns:
            File text, or None when the file is missing, not base64 encoded,
            or could not be fetched.
        """
        try:
            response = self.request("GET", path)
            if not response.is_success:
                return None
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.debug("Could not fetch %s: %s", path, e)
            return None

        if not isinstance(data, dict):
            return None
        if data.get("encoding") != "base64" or not data.get("content"):
            return None
        try:
            return base64.b64decode(data["content"]).decode("utf-8")
        except (ValueError, UnicodeDecodeError) as e:
            logger.debug("Could not decode %s: %s", path, e)
            return None

    def post_graphql(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """
        Run a GraphQL query.

        Raises:
            GitHubApiError: If the request fails or the response carries errors.
        """
        response = self.request(
            "POST", "/graphql", json_body={"query": query, "variables": variables}
        )
        self._raise_for_status(response)
        payload = response.json()
        errors = payload.get("errors") if isinstance(payload, dict) else None
        if errors:
            message = errors[0].get("message") if isinstance(errors[0], dict) else None
            raise GitHubApiError(
                response.status_code, message or "GraphQL query failed", errors
            )
        return payload.get("data") or {}
