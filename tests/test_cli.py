"""
Tests for the repo-pulse command-line interface.
"""

import json
from datetime import datetime, timezone
from unittest.mock import patch

from typer.testing import CliRunner

from repo_pulse.cli import HEATMAP_GLYPHS, app, heatmap_rows
from repo_pulse.collaboration import EMPTY_NETWORK
from repo_pulse.errors import GitHubApiError
from repo_pulse.metrics.contributions import (
    ContributionDay,
    ContributionHeatmap,
    format_contribution_data,
)
from repo_pulse.metrics.health_score import HealthScoreInput, calculate_health_score
from repo_pulse.metrics.pr_analytics import EMPTY_PR_ANALYTICS
from repo_pulse.models import RepositoryMetadata
from repo_pulse.narrative import SYSTEM_PROMPT

runner = CliRunner()

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)
HEALTH = calculate_health_score(
    HealthScoreInput(repo=RepositoryMetadata("octo/widgets", "widgets")), now=NOW
)


class TestRepositoryCommands:
    """Test commands that analyze a repository."""

    def test_health_json(self):
        with (
            patch("repo_pulse.cli.GitHubClient"),
            patch("repo_pulse.cli.analyze_repo_health", return_value=HEALTH) as mock_analyze,
        ):
            result = runner.invoke(app, ["health", "octo/widgets", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output) == HEALTH.to_dict()
        assert mock_analyze.call_args.args[1:] == ("octo", "widgets")

    def test_health_table(self):
        with (
            patch("repo_pulse.cli.GitHubClient"),
            patch("repo_pulse.cli.analyze_repo_health", return_value=HEALTH),
        ):
            result = runner.invoke(app, ["health", "octo/widgets"])

        assert result.exit_code == 0
        assert "0/100" in result.output
        assert "Recommendations" in result.output

    def test_invalid_slug(self):
        with patch("repo_pulse.cli.GitHubClient"):
            result = runner.invoke(app, ["health", "widgets"])
        assert result.exit_code == 1
        assert "Expected OWNER/REPO" in result.output

    def test_rate_limit_error(self):
        with (
            patch("repo_pulse.cli.GitHubClient"),
            patch(
                "repo_pulse.cli.analyze_pr_analytics",
                side_effect=GitHubApiError(429, "Too many requests"),
            ),
        ):
            result = runner.invoke(app, ["prs", "octo/widgets"])
        assert result.exit_code == 1
        assert "Rate limit exceeded" in result.output
        assert "HTTP 429" in result.output

    def test_prs_json(self):
        with (
            patch("repo_pulse.cli.GitHubClient"),
            patch("repo_pulse.cli.analyze_pr_analytics", return_value=EMPTY_PR_ANALYTICS),
        ):
            result = runner.invoke(app, ["prs", "octo/widgets", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["totalPRs"] == 0
        assert data["successRate"] == 0

    def test_insecure_flag_disables_ssl(self):
        with (
            patch("repo_pulse.cli.GitHubClient"),
            patch("repo_pulse.cli.analyze_repo_health", return_value=HEALTH),
            patch("repo_pulse.cli.set_verify_ssl") as mock_verify,
        ):
            runner.invoke(app, ["health", "octo/widgets", "--insecure"])
        mock_verify.assert_called_once_with(False)


class TestUserCommands:
    """Test commands that analyze a user."""

    def test_network_empty(self):
        with (
            patch("repo_pulse.cli.GitHubClient"),
            patch("repo_pulse.cli.analyze_collaborations", return_value=EMPTY_NETWORK),
        ):
            result = runner.invoke(app, ["network", "octo", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["mostActiveCollaborator"] is None

    def test_heatmap_passes_year(self):
        heatmap = format_contribution_data([], year=2023)
        with (
            patch("repo_pulse.cli.GitHubClient"),
            patch("repo_pulse.cli.analyze_contributions", return_value=heatmap) as mock_analyze,
        ):
            result = runner.invoke(app, ["heatmap", "alice", "--year", "2023"])
        assert result.exit_code == 0
        assert mock_analyze.call_args.kwargs["year"] == 2023
        assert "0 contributions" in result.output

    def test_heatmap_invalid_year(self):
        with (
            patch("repo_pulse.cli.GitHubClient"),
            patch(
                "repo_pulse.cli.analyze_contributions",
                side_effect=ValueError("Invalid year: 1990"),
            ),
        ):
            result = runner.invoke(app, ["heatmap", "alice", "-y", "1990"])
        assert result.exit_code == 1
        assert "Invalid year" in result.output


class TestManifestCommand:
    """Test offline manifest analysis."""

    def test_package_json(self, tmp_path):
        project = tmp_path / "webapp"
        project.mkdir()
        manifest = project / "package.json"
        manifest.write_text(
            json.dumps(
                {
                    "dependencies": {"react": "^18.2.0", "lodash": "4.17.21"},
                    "devDependencies": {"jest": "29.7.0"},
                }
            )
        )
        result = runner.invoke(app, ["manifest", str(manifest), "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["dependencyHealth"]["total"] == 3
        assert data["dependencyHealth"]["outdated"] == 1
        assert data["dependencyGraph"]["nodes"][0]["id"] == "root-webapp"
        assert data["manifest"]["ecosystem"] == "npm"

    def test_table_output(self, tmp_path):
        manifest = tmp_path / "requirements.txt"
        manifest.write_text("requests>=2.31\n")
        result = runner.invoke(app, ["manifest", str(manifest)])
        assert result.exit_code == 0
        assert "requests" in result.output

    def test_unsupported_file(self, tmp_path):
        manifest = tmp_path / "pom.xml"
        manifest.write_text("<project/>")
        result = runner.invoke(app, ["manifest", str(manifest)])
        assert result.exit_code == 1
        assert "Unsupported manifest" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["manifest", str(tmp_path / "go.mod")])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_unparseable_file(self, tmp_path):
        manifest = tmp_path / "package.json"
        manifest.write_text("{oops")
        result = runner.invoke(app, ["manifest", str(manifest)])
        assert result.exit_code == 1
        assert "Could not parse" in result.output

    def test_invalid_utf8(self, tmp_path):
        manifest = tmp_path / "requirements.txt"
        manifest.write_bytes(b"requests\xff\xfe>=2.0\n")
        result = runner.invoke(app, ["manifest", str(manifest)])
        assert result.exit_code == 1
        assert "Could not read" in result.output


class TestPromptCommand:
    """Test narrative prompt output."""

    def _invoke(self, *extra):
        with (
            patch("repo_pulse.cli.GitHubClient"),
            patch("repo_pulse.cli.analyze_repo_health", return_value=HEALTH),
            patch("repo_pulse.cli.analyze_code_quality", return_value=None),
            patch("repo_pulse.cli.analyze_pr_analytics", return_value=EMPTY_PR_ANALYTICS),
            patch(
                "repo_pulse.cli.fetch_repository",
                return_value=RepositoryMetadata("octo/widgets", "widgets"),
            ),
        ):
            return runner.invoke(app, ["prompt", "octo/widgets", *extra])

    def test_plain_prompt(self):
        result = self._invoke()
        assert result.exit_code == 0
        assert result.output.startswith("Repository: octo/widgets")

    def test_messages_include_system_prompt(self):
        result = self._invoke("--messages")
        assert result.exit_code == 0
        messages = json.loads(result.output)
        assert messages[0] == {"role": "system", "content": SYSTEM_PROMPT}
        assert messages[1]["role"] == "user"
        assert messages[1]["content"].startswith("Repository: octo/widgets")


class TestHeatmapRows:
    """Test weekday alignment of the heatmap."""

    def test_rows_start_on_monday(self):
        # 2024-01-03 is a Wednesday
        days = [
            ContributionDay("2024-01-03", 4),
            ContributionDay("2024-01-04", 0),
            ContributionDay("2024-01-05", 2),
        ]
        rows = heatmap_rows(ContributionHeatmap(days, 6, 4))

        assert len(rows) == 7
        assert rows[0] == " "
        assert rows[1] == " "
        assert rows[2] == HEATMAP_GLYPHS[4]
        assert rows[3] == HEATMAP_GLYPHS[0]
        assert rows[4] == HEATMAP_GLYPHS[3]
        assert rows[5] == ""

    def test_week_wraps_to_next_column(self):
        days = [ContributionDay(f"2024-01-{d:02d}", 1) for d in range(1, 9)]
        rows = heatmap_rows(ContributionHeatmap(days, 8, 1))
        # 2024-01-01 and 2024-01-08 are Mondays
        assert rows[0] == HEATMAP_GLYPHS[4] * 2
        assert all(len(row) == 1 for row in rows[1:])

    def test_empty(self):
        assert heatmap_rows(ContributionHeatmap([], 0, 0)) == []
