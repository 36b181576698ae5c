"""
Configuration management for repo-pulse.

Settings are read from:
1. Environment variables (``.env`` is loaded on import)
2. .repo-pulse.toml (local config)
3. pyproject.toml (project-level config)

Both files use the ``[tool.repo-pulse]`` table.
"""

import os
import tomllib
from pathlib import Path
from typing import NamedTuple

from dotenv import load_dotenv

load_dotenv()

# project_root is the parent directory of repo_pulse/
PROJECT_ROOT = Path(__file__).resolve().parent.parent

DEFAULT_API_URL = "https://api.github.com"

# Global configuration for SSL verification
# Default: True (verify SSL certificates)
# Can be set to False by CLI --insecure flag
VERIFY_SSL = True


class SampleLimits(NamedTuple):
    """How much data is fetched per analysis."""

    pr_details: int = 50
    commits: int = 100
    collaboration_repos: int = 20
    collaboration_prs_per_repo: int = 10
    dependency_nodes: int = 100


def load_config_file(config_path: Path) -> dict:
    """Load a TOML configuration file."""
    if not config_path.exists():
        return {}
    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except Exception as e:
        raise ValueError(f"Failed to load config from {config_path}: {e}") from e


def get_tool_config() -> dict:
    """
    Load the ``[tool.repo-pulse]`` table.

    Priority:
    1. .repo-pulse.toml (local config, highest priority)
    2. pyproject.toml (project-level config, fallback)

    Returns:
        The table of the first file that defines it, or an empty dict.
    """
    for filename in (".repo-pulse.toml", "pyproject.toml"):
        config_path = PROJECT_ROOT / filename
        if not config_path.exists():
            continue
        config = load_config_file(config_path)
        table = config.get("tool", {}).get("repo-pulse", {})
        if table:
            return table
    return {}


def get_github_token() -> str | None:
    """
    Get the GitHub token from the GITHUB_TOKEN environment variable.

    Returns:
        The stripped token, or None when unset. Requests are then made
        unauthenticated, with lower rate limits.
    """
    token = os.getenv("GITHUB_TOKEN", "").strip()
    return token or None


def get_api_base_url() -> str:
    """
    Get the GitHub REST API base URL.

    Priority:
    1. REPO_PULSE_API_URL environment variable
    2. ``api_url`` in the config file
    3. Default: https://api.github.com
    """
    env_url = os.getenv("REPO_PULSE_API_URL")
    if env_url:
        return env_url.rstrip("/")

    config_url = get_tool_config().get("api_url")
    if config_url:
        return str(config_url).rstrip("/")

    return DEFAULT_API_URL


def get_sample_limits() -> SampleLimits:
    """
    Get the fetch sample sizes.

    Values in ``[tool.repo-pulse.limits]`` override the defaults; unknown
    keys and non-positive values are ignored.
    """
    defaults = SampleLimits()
    overrides = get_tool_config().get("limits", {})
    values = {}
    for field in SampleLimits._fields:
        value = overrides.get(field)
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            values[field] = value
    return defaults._replace(**values)


def set_verify_ssl(verify: bool) -> None:
    """
    Set the SSL verification setting globally.

    Args:
        verify: Whether to verify SSL certificates.
    """
    global VERIFY_SSL
    VERIFY_SSL = verify


def get_verify_ssl() -> bool:
    """
    Get the current SSL verification setting.

    Returns:
        Whether SSL verification is enabled.
    """
    return VERIFY_SSL
