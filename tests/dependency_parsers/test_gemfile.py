"""Tests for the Gemfile parser."""

from repo_pulse.dependency_parsers import parse_gemfile


def test_gems_with_and_without_versions():
    content = """source "https://rubygems.org"

# framework
gem "rails", "7.1.3"
gem 'puma', '~> 6.0'
gem "bootsnap", require: false
"""
    result = parse_gemfile(content)
    assert result is not None
    assert result.dependencies == {
        "rails": "7.1.3",
        "puma": "~> 6.0",
        "bootsnap": "unknown",
    }
    assert result.ecosystem == "ruby"


def test_no_gems_returns_none():
    assert parse_gemfile('source "https://rubygems.org"\n') is None
