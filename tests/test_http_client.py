"""
Tests for the shared HTTP client.
"""

from repo_pulse.config import get_verify_ssl, set_verify_ssl
from repo_pulse.http_client import USER_AGENT, _get_http_client, close_http_client


def test_client_is_reused():
    try:
        assert _get_http_client() is _get_http_client()
    finally:
        close_http_client()


def test_client_recreated_when_ssl_setting_changes():
    original = get_verify_ssl()
    try:
        set_verify_ssl(True)
        first = _get_http_client()
        set_verify_ssl(False)
        second = _get_http_client()
        assert second is not first
        assert first.is_closed
    finally:
        set_verify_ssl(original)
        close_http_client()


def test_close_resets_client():
    client = _get_http_client()
    close_http_client()
    assert client.is_closed
    assert _get_http_client() is not client
    close_http_client()


def test_client_identifies_itself():
    try:
        client = _get_http_client()
        assert client.headers["User-Agent"] == USER_AGENT
        assert USER_AGENT.startswith("repo-pulse/")
    finally:
        close_http_client()
