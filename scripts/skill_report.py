# ABOUTME: Provides a CLI over the analytics tools for inspecting a learner's quiz performance.
# ABOUTME: Prints Rich tables by default and the raw tool payload with --json.

import json
from pathlib import Path
from typing import Dict, Optional

import typer
from rich.console import Console
from rich.table import Table

from src.common.errors import InvalidInputError, StoreUnavailableError
from src.common.logging_utils import configure_logging
from src.common.settings import load_settings
from src.event_store import EventStore, build_store
from src.skill_analytics.tools import TOOLS, run_tool

console = Console()
app = typer.Typer(help="Report quiz skill analytics for a learner account.")

TREND_COLORS = {"improving": "green", "declining": "red", "stable": "white", "insufficient_data": "dim"}


def _store(config: Optional[Path]) -> EventStore:
    settings = load_settings(config)
    configure_logging(settings.log_level)
    return build_store(settings.store)


def _run(tool: str, params: Dict, config: Optional[Path]) -> Dict:
    try:
        return run_tool(tool, params, _store(config))
    except InvalidInputError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2)
    except StoreUnavailableError as exc:
        console.print(f"[red]Store unavailable: {exc}[/red]")
        raise typer.Exit(code=1)


def _print_json(result: Dict) -> None:
    typer.echo(json.dumps(result, indent=2, ensure_ascii=False))


def _breakdown_table(title: str, rows) -> Table:
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Name")
    table.add_column("Total", justify="right")
    table.add_column("Correct", justify="right")
    table.add_column("Accuracy", justify="right")
    for row in rows:
        table.add_row(row["name"], str(row["total"]), str(row["correct"]), f"{row['accuracyRate']}%")
    return table


@app.command("weak-categories")
def weak_categories(
    account_id: str = typer.Option(..., "--account-id", help="Learner account identifier."),
    min_answers: Optional[int] = typer.Option(None, "--min-answers", help="Minimum answers for a category to count."),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to skill analytics YAML config."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw tool payload."),
) -> None:
    """
    Rank categories weakest first and list practice recommendations.
    """
    params = {"accountId": account_id}
    if min_answers is not None:
        params["minAnswers"] = min_answers
    result = _run("analyze_weak_categories", params, config)
    if as_json:
        _print_json(result)
        return
    if not result["found"]:
        console.print(f"[yellow]{result['message']}[/yellow]")
        raise typer.Exit(code=1)

    source = "aggregate stats" if result["skillStatsAvailable"] else "answer log"
    console.rule(f"[bold blue]Weak categories for {account_id}[/bold blue]")
    console.print(f"[bold]Source:[/] {source}    [bold]Analyzed:[/] {result['totalCategoriesAnalyzed']}")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Category")
    table.add_column("Answers", justify="right")
    table.add_column("Accuracy", justify="right")
    table.add_column("Trend")
    weak = {row["category"] for row in result["weakCategories"]}
    for row in result["allCategories"]:
        name = f"[red]{row['category']}[/red]" if row["category"] in weak else row["category"]
        color = TREND_COLORS.get(row["recentTrend"], "white")
        table.add_row(
            name,
            str(row["totalAnswers"]),
            f"{row['accuracyRate']}%",
            f"[{color}]{row['recentTrend']}[/{color}]",
        )
    console.print(table)

    console.print()
    console.print("[bold yellow]Recommendations[/bold yellow]")
    for line in result["recommendations"]:
        console.print(f"  → {line}")
    console.print(f"[dim]{result['analysisNote']}[/dim]")


@app.command("user-stats")
def user_stats(
    account_id: str = typer.Option(..., "--account-id", help="Learner account identifier."),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to skill analytics YAML config."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw tool payload."),
) -> None:
    """
    Show overall accuracy with category and difficulty breakdowns.
    """
    result = _run("get_user_stats", {"accountId": account_id}, config)
    if as_json:
        _print_json(result)
        return
    if not result["found"]:
        console.print(f"[yellow]{result['message']}[/yellow]")
        raise typer.Exit(code=1)

    user = result["user"]
    console.rule(f"[bold blue]Stats for {user['accountId']}[/bold blue]")
    console.print(
        f"[bold]Quizzes:[/] {user['totalQuizzes']}  [bold]Correct:[/] {user['correctCount']}  "
        f"[bold]Accuracy:[/] {user['overallAccuracyRate']}%"
    )
    console.print(_breakdown_table("Categories", result["categoryBreakdown"]))
    console.print(_breakdown_table(f"Difficulty (last {result['recentAnswersCount']} answers)", result["difficultyBreakdown"]))


@app.command("history")
def history(
    account_id: str = typer.Option(..., "--account-id", help="Learner account identifier."),
    limit: Optional[int] = typer.Option(None, "--limit", help="Maximum answers to show (1-100)."),
    category: Optional[str] = typer.Option(None, "--category", help="Only this category."),
    difficulty: Optional[str] = typer.Option(None, "--difficulty", help="Only this difficulty."),
    incorrect_only: bool = typer.Option(False, "--incorrect-only", help="Only incorrect answers."),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to skill analytics YAML config."),
) -> None:
    """
    Print the filtered answer history payload.
    """
    params = {"accountId": account_id, "incorrectOnly": incorrect_only}
    for key, value in (("limit", limit), ("category", category), ("difficulty", difficulty)):
        if value is not None:
            params[key] = value
    _print_json(_run("get_answers_history", params, config))


@app.command("tool")
def tool(
    name: str = typer.Argument(..., help=f"One of: {', '.join(sorted(TOOLS))}."),
    params: str = typer.Option("{}", "--params", help="JSON object of tool parameters."),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to skill analytics YAML config."),
) -> None:
    """
    Call any registered tool with JSON parameters and print its payload.
    """
    try:
        parsed = json.loads(params)
    except json.JSONDecodeError as exc:
        console.print(f"[red]--params is not valid JSON: {exc}[/red]")
        raise typer.Exit(code=2)
    _print_json(_run(name, parsed, config))


if __name__ == "__main__":
    app()
