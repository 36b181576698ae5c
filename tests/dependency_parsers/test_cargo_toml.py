"""Tests for the Cargo.toml parser."""

from repo_pulse.dependency_parsers import parse_cargo_toml


def test_parse_dependencies_table():
    """Test plain name = "version" entries are read."""
    content = """
[package]
name = "demo"
version = "0.1.0"

[dependencies]
serde = "1.0.197"
# async runtime
tokio = "1"

[dev-dependencies]
criterion = "0.5"
"""
    result = parse_cargo_toml(content)
    assert result is not None
    assert result.dependencies == {"serde": "1.0.197", "tokio": "1"}
    assert result.dev_dependencies is None
    assert result.ecosystem == "rust"


def test_inline_tables_are_skipped():
    content = '[dependencies]\nserde = { version = "1", features = ["derive"] }\nlog = "0.4.21"\n'
    result = parse_cargo_toml(content)
    assert result.dependencies == {"log": "0.4.21"}


def test_package_version_is_not_a_dependency():
    assert parse_cargo_toml('[package]\nname = "demo"\nversion = "0.1.0"\n') is None
