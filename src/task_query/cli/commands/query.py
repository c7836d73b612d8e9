"""Command module for running the task queries in a markdown file."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from task_query.cli.app import app, parse_day
from task_query.config import get_config
from task_query.markdown import QueryBlockDetector, load_tasks_file, load_vault, serialize_task
from task_query.models import TasksFile
from task_query.query import Query, QueryResult

console = Console()


def load_query_file(query_file: Path, vault: Path) -> tuple[TasksFile, str]:
    """Read the file holding the queries; files outside the vault are named by file name."""
    query_file, vault = query_file.resolve(), vault.resolve()
    if query_file.is_relative_to(vault):
        return load_tasks_file(query_file, vault)
    return load_tasks_file(query_file, query_file.parent)


def render_result(result: QueryResult, title: str, out: Console = console) -> None:
    """Print one query result: errors, grouped tasks, count and explanation."""
    out.print(f"[bold]{escape(title)}[/bold]")

    if result.explanation:
        out.print(f"[dim]{escape(result.explanation)}[/dim]")

    for error in result.errors:
        out.print(f"[red]{escape(str(error))}[/red]")

    for group in result.groups:
        if group.heading:
            out.print(f"[cyan]#### {escape(group.heading)}[/cyan]")
        for task in group.tasks:
            out.print(escape(serialize_task(task)), soft_wrap=True)

    count = result.task_count
    out.print(f"{count} task{'s' if count != 1 else ''}")


@app.command()
def query(
    query_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Markdown file with ```tasks blocks"),
    vault: Optional[Path] = typer.Option(
        None, "--vault", file_okay=False, exists=True, help="Folder of markdown files to search"
    ),
    today: Optional[str] = typer.Option(None, "--today", help="Evaluate as if today were YYYY-MM-DD"),
) -> None:
    """Run every ```tasks block in QUERY_FILE against the tasks in the vault."""
    day = parse_day(today)
    root = vault or query_file.parent
    config = get_config()

    tasks = load_vault(root)
    tasks_file, text = load_query_file(query_file, root)
    blocks = QueryBlockDetector.detect_queries(text)
    if not blocks:
        console.print(f"[yellow]No tasks queries found in {escape(str(query_file))}[/yellow]")
        raise typer.Exit(1)

    failed = False
    for index, block in enumerate(blocks, start=1):
        result = Query(block.query, tasks_file, today=day, global_query=config.global_query).evaluate(tasks)
        render_result(result, f"Query {index} (line {block.start_line + 1})")
        console.print()
        failed = failed or result.has_errors

    if failed:
        raise typer.Exit(1)
