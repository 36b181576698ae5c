"""
Command-line interface for repo-pulse.
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Callable, TypeVar

import httpx
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from repo_pulse.analysis import (
    analyze_code_quality,
    analyze_collaborations,
    analyze_contributions,
    analyze_dependencies,
    analyze_pr_analytics,
    analyze_repo_health,
    fetch_repository,
)
from repo_pulse.collaboration import CollaborationNetwork
from repo_pulse.config import set_verify_ssl
from repo_pulse.dependency_graph import DependencyGraphReport, build_dependency_report
from repo_pulse.dependency_parsers import (
    get_manifest_parser,
    list_manifest_files,
    parse_manifest,
)
from repo_pulse.errors import GitHubApiError, describe_error
from repo_pulse.github_client import GitHubClient, split_repo_slug
from repo_pulse.http_client import close_http_client
from repo_pulse.metrics.code_quality import CodeQualityMetrics
from repo_pulse.metrics.contributions import ContributionHeatmap, get_contribution_level
from repo_pulse.metrics.dependency_health import DependencyHealth, analyze_dependency_health
from repo_pulse.metrics.health_score import RepoHealthScore
from repo_pulse.metrics.pr_analytics import PRAnalytics
from repo_pulse.narrative import build_messages, build_repository_prompt

T = TypeVar("T")

# --- Typer App ---
app = typer.Typer(help="GitHub repository health and collaboration analytics.")
console = Console()

HEATMAP_GLYPHS = ("·", "░", "▒", "▓", "█")

# --- Shared Options ---

JsonOption = typer.Option(False, "--json", help="Print the report as JSON.")
VerboseOption = typer.Option(
    False, "--verbose", "-v", help="Show debug logging (skipped requests, retries)."
)
InsecureOption = typer.Option(
    False, "--insecure", help="Disable SSL certificate verification for HTTPS requests."
)

# --- Helper Functions ---


def configure_logging(verbose: bool) -> None:
    """Route library logging through rich; DEBUG when verbose, else WARNING."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _prepare(verbose: bool, insecure: bool) -> None:
    configure_logging(verbose)
    set_verify_ssl(not insecure)


def _run(task: Callable[[], T], failure_message: str) -> T:
    """Run a fetch task, turning input and API errors into exit code 1."""
    try:
        return task()
    except ValueError as e:
        console.print(f"[yellow]⚠️  {e}[/yellow]")
        raise typer.Exit(code=1) from None
    except GitHubApiError as e:
        payload = describe_error(e, failure_message)
        console.print(f"[red]❌ {payload['error']} (HTTP {payload['status']})[/red]")
        if "details" in payload:
            console.print(f"[dim]{json.dumps(payload['details'], default=str)}[/dim]")
        raise typer.Exit(code=1) from None
    except httpx.HTTPError as e:
        console.print(f"[red]❌ {failure_message} {e}[/red]")
        raise typer.Exit(code=1) from None
    finally:
        close_http_client()


def _print_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _score_color(score: float, healthy: float, warning: float) -> str:
    if score >= healthy:
        return "green"
    if score >= warning:
        return "yellow"
    return "red"


def _print_recommendations(recommendations: list[str]) -> None:
    if recommendations:
        console.print("\n[bold cyan]Recommendations:[/bold cyan]")
        for item in recommendations:
            console.print(f"  • {item}")


def display_health(repo_name: str, health: RepoHealthScore) -> None:
    """Display a health score with its category breakdown."""
    color = _score_color(health.overall, 80, 50)
    console.print(
        f"🩺 [bold]{repo_name}[/bold] health score: "
        f"[{color}]{health.overall}/100[/{color}]"
    )
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Category", style="cyan")
    table.add_column("Score", justify="right")
    b = health.breakdown
    for label, value, cap in (
        ("Documentation", b.documentation, 30),
        ("Maintenance", b.maintenance, 25),
        ("Community", b.community, 20),
        ("Issue response", b.issue_response, 15),
        ("Code quality", b.code_quality, 10),
    ):
        table.add_row(label, f"{value}/{cap}")
    console.print(table)
    _print_recommendations(health.recommendations)


def display_dependency_health(health: DependencyHealth) -> None:
    table = Table(title="Dependency Health", show_header=True, header_style="bold magenta")
    table.add_column("Ecosystem", style="cyan")
    table.add_column("Total", justify="right")
    table.add_column("Pinned", justify="right", style="green")
    table.add_column("Unpinned", justify="right", style="yellow")
    for name, eco in health.ecosystems.items():
        table.add_row(name, str(eco.total), str(eco.total - eco.outdated), str(eco.outdated))
    if not health.ecosystems:
        table.add_row("-", "0", "0", "0")
    console.print(table)


def display_quality(repo_name: str, quality: CodeQualityMetrics) -> None:
    """Display code quality metrics and the recent churn series."""
    console.print(f"🔍 [bold]{repo_name}[/bold] code quality")
    console.print(
        f"  PR review time: avg {quality.average_pr_review_time}h, "
        f"median {quality.median_pr_review_time}h"
    )
    console.print(
        f"  Average churn per commit: {quality.average_churn_per_commit} lines"
    )
    if quality.code_churn:
        table = Table(title="Code Churn", show_header=True, header_style="bold magenta")
        table.add_column("Date", style="cyan")
        table.add_column("Commits", justify="right")
        table.add_column("+", justify="right", style="green")
        table.add_column("-", justify="right", style="red")
        table.add_column("Net", justify="right")
        for day in quality.code_churn:
            table.add_row(
                day.date,
                str(day.commits),
                str(day.additions),
                str(day.deletions),
                str(day.net_change),
            )
        console.print(table)
    display_dependency_health(quality.dependency_health)
    _print_recommendations(quality.recommendations)


def display_pr_analytics(repo_name: str, analytics: PRAnalytics) -> None:
    """Display PR counters, merge time distribution and top reviewers."""
    console.print(
        f"🔀 [bold]{repo_name}[/bold]: {analytics.total_prs} PRs "
        f"({analytics.merged_prs} merged, {analytics.closed_prs} closed, "
        f"{analytics.open_prs} open)"
    )
    color = _score_color(analytics.success_rate, 70, 40)
    console.print(f"  Success rate: [{color}]{analytics.success_rate}%[/{color}]")
    console.print(
        f"  Average review turnaround: {analytics.average_review_turnaround_time}h"
    )
    sizes = analytics.pr_size_analysis
    console.print(
        f"  Sizes: {sizes.small} small, {sizes.medium} medium, {sizes.large} large"
    )

    if analytics.merge_time_distribution:
        table = Table(title="Merge Time", show_header=True, header_style="bold magenta")
        table.add_column("Range", style="cyan")
        table.add_column("PRs", justify="right")
        for bucket in analytics.merge_time_distribution:
            table.add_row(bucket.range, str(bucket.count))
        console.print(table)

    if analytics.active_reviewers:
        table = Table(title="Active Reviewers", show_header=True, header_style="bold magenta")
        table.add_column("Reviewer", style="cyan")
        table.add_column("Reviews", justify="right")
        for reviewer in analytics.active_reviewers:
            table.add_row(reviewer.login, str(reviewer.reviews))
        console.print(table)


def display_dependency_graph(repo_name: str, report: DependencyGraphReport) -> None:
    """Display the dependency list of a graph report."""
    if not report.ecosystems:
        console.print(f"[yellow]No supported manifest found for {repo_name}.[/yellow]")
        console.print(f"[dim]Looked for: {', '.join(list_manifest_files())}[/dim]")
        return
    console.print(
        f"📦 [bold]{repo_name}[/bold] ({', '.join(report.ecosystems)}): "
        f"{report.total_dependencies} dependencies, "
        f"{report.total_dev_dependencies} dev dependencies"
    )
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan")
    table.add_column("Version")
    table.add_column("Type")
    for node in report.nodes:
        if node.type != "root":
            table.add_row(node.name, node.version, node.type)
    console.print(table)
    shown = len(report.nodes) - 1
    declared = report.total_dependencies + report.total_dev_dependencies
    if 0 <= shown < declared:
        console.print(f"[dim]Showing {shown} of {declared} declared entries.[/dim]")


def display_network(username: str, network: CollaborationNetwork) -> None:
    """Display collaborators and their strongest review links."""
    console.print(
        f"🤝 [bold]{username}[/bold]: {network.total_collaborators} collaborators "
        f"across {network.total_repos} repositories"
    )
    if network.most_active_collaborator:
        console.print(
            f"  Most active: {network.most_active_collaborator['login']} "
            f"({network.most_active_collaborator['contributions']} contributions)"
        )
    if network.nodes:
        table = Table(title="Collaborators", show_header=True, header_style="bold magenta")
        table.add_column("Login", style="cyan")
        table.add_column("Contributions", justify="right")
        table.add_column("Repos", justify="right")
        for node in network.nodes:
            table.add_row(node.login, str(node.contributions), str(len(node.repos)))
        console.print(table)
    if network.edges:
        table = Table(title="Review Links", show_header=True, header_style="bold magenta")
        table.add_column("Author", style="cyan")
        table.add_column("Reviewer", style="cyan")
        table.add_column("Reviews", justify="right")
        for edge in network.edges:
            table.add_row(edge.source, edge.target, str(edge.weight))
        console.print(table)


def heatmap_rows(heatmap: ContributionHeatmap) -> list[str]:
    """Week columns, one row per weekday from Monday to Sunday."""
    if not heatmap.contributions:
        return []
    # rows run Monday..Sunday; days before the first weekday are left blank
    offset = date.fromisoformat(heatmap.contributions[0].date).weekday()
    rows: list[list[str]] = [[" "] if weekday < offset else [] for weekday in range(7)]
    for index, day in enumerate(heatmap.contributions, start=offset):
        level = get_contribution_level(day.count, heatmap.max_daily_contributions)
        rows[index % 7].append(HEATMAP_GLYPHS[level])
    return ["".join(row) for row in rows]


def display_heatmap(username: str, heatmap: ContributionHeatmap) -> None:
    console.print(
        f"📅 [bold]{username}[/bold]: {heatmap.total_contributions} contributions "
        f"(busiest day: {heatmap.max_daily_contributions})"
    )
    for row in heatmap_rows(heatmap):
        console.print(row, style="green", highlight=False)


# --- Commands ---


@app.command()
def health(
    repository: str = typer.Argument(..., help="Repository as OWNER/REPO."),
    as_json: bool = JsonOption,
    verbose: bool = VerboseOption,
    insecure: bool = InsecureOption,
):
    """Score repository health (documentation, maintenance, community, issues, quality)."""
    _prepare(verbose, insecure)
    result = _run(
        lambda: analyze_repo_health(GitHubClient(), *split_repo_slug(repository)),
        "Failed to calculate repository health score.",
    )
    if as_json:
        _print_json(result.to_dict())
    else:
        display_health(repository, result)


@app.command()
def quality(
    repository: str = typer.Argument(..., help="Repository as OWNER/REPO."),
    as_json: bool = JsonOption,
    verbose: bool = VerboseOption,
    insecure: bool = InsecureOption,
):
    """Show PR review times, code churn and dependency health."""
    _prepare(verbose, insecure)
    result = _run(
        lambda: analyze_code_quality(GitHubClient(), *split_repo_slug(repository)),
        "Failed to fetch code quality metrics.",
    )
    if as_json:
        _print_json(result.to_dict())
    else:
        display_quality(repository, result)


@app.command()
def prs(
    repository: str = typer.Argument(..., help="Repository as OWNER/REPO."),
    as_json: bool = JsonOption,
    verbose: bool = VerboseOption,
    insecure: bool = InsecureOption,
):
    """Show pull request analytics."""
    _prepare(verbose, insecure)
    result = _run(
        lambda: analyze_pr_analytics(GitHubClient(), *split_repo_slug(repository)),
        "Failed to fetch PR analytics.",
    )
    if as_json:
        _print_json(result.to_dict())
    else:
        display_pr_analytics(repository, result)


@app.command()
def deps(
    repository: str = typer.Argument(..., help="Repository as OWNER/REPO."),
    as_json: bool = JsonOption,
    verbose: bool = VerboseOption,
    insecure: bool = InsecureOption,
):
    """Show the dependency graph of the first supported manifest."""
    _prepare(verbose, insecure)
    result = _run(
        lambda: analyze_dependencies(GitHubClient(), *split_repo_slug(repository)),
        "Failed to fetch dependencies.",
    )
    if as_json:
        _print_json(result.to_dict())
    else:
        display_dependency_graph(repository, result)


@app.command()
def network(
    username: str = typer.Argument(..., help="GitHub user or organization."),
    as_json: bool = JsonOption,
    verbose: bool = VerboseOption,
    insecure: bool = InsecureOption,
):
    """Build the review collaboration network across recent repositories."""
    _prepare(verbose, insecure)
    result = _run(
        lambda: analyze_collaborations(GitHubClient(), username),
        "Failed to fetch collaborations.",
    )
    if as_json:
        _print_json(result.to_dict())
    else:
        display_network(username, result)


@app.command()
def heatmap(
    username: str = typer.Argument(..., help="GitHub username."),
    year: int | None = typer.Option(
        None, "--year", "-y", help="Calendar year to show (default: trailing year)."
    ),
    as_json: bool = JsonOption,
    verbose: bool = VerboseOption,
    insecure: bool = InsecureOption,
):
    """Show the daily contribution heatmap."""
    _prepare(verbose, insecure)
    result = _run(
        lambda: analyze_contributions(GitHubClient(), username, year=year),
        "Failed to fetch contributions.",
    )
    if as_json:
        _print_json(result.to_dict())
    else:
        display_heatmap(username, result)


@app.command()
def prompt(
    repository: str = typer.Argument(..., help="Repository as OWNER/REPO."),
    messages: bool = typer.Option(
        False, "--messages", help="Print chat messages (system and user) as JSON."
    ),
    verbose: bool = VerboseOption,
    insecure: bool = InsecureOption,
):
    """Print an LLM prompt summarizing the repository's metrics."""
    _prepare(verbose, insecure)

    def build() -> str:
        owner, repo = split_repo_slug(repository)
        client = GitHubClient()
        return build_repository_prompt(
            f"{owner}/{repo}",
            health=analyze_repo_health(client, owner, repo),
            quality=analyze_code_quality(client, owner, repo),
            analytics=analyze_pr_analytics(client, owner, repo),
            repo=fetch_repository(client, owner, repo),
        )

    text = _run(build, "Failed to build repository prompt.")
    if messages:
        _print_json(build_messages(text))
    else:
        typer.echo(text)


@app.command()
def manifest(
    path: Path = typer.Argument(..., help="Path to a local manifest file."),
    as_json: bool = JsonOption,
):
    """Parse a local manifest and show its dependency health and graph (offline)."""
    if get_manifest_parser(path.name) is None:
        console.print(f"[yellow]⚠️  Unsupported manifest: {path.name}[/yellow]")
        console.print(f"[dim]Supported files: {', '.join(list_manifest_files())}[/dim]")
        raise typer.Exit(code=1)
    if not path.is_file():
        console.print(f"[yellow]⚠️  Manifest file not found: {path}[/yellow]")
        raise typer.Exit(code=1)

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]❌ Could not read {path}: {e}[/red]")
        raise typer.Exit(code=1) from None

    parsed = parse_manifest(path.name, content)
    if parsed is None:
        console.print(f"[red]❌ Could not parse any dependencies from {path}[/red]")
        raise typer.Exit(code=1)

    project = path.resolve().parent.name or path.name
    dependency_health = analyze_dependency_health(parsed)
    report = build_dependency_report(parsed, project)

    if as_json:
        _print_json(
            {
                "manifest": parsed.to_dict(),
                "dependencyHealth": dependency_health.to_dict(),
                "dependencyGraph": report.to_dict(),
            }
        )
        return

    display_dependency_graph(project, report)
    display_dependency_health(dependency_health)


if __name__ == "__main__":
    app()
