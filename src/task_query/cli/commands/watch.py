"""Watch command - keep query results current while markdown files change."""

import asyncio
import signal
import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from watchfiles import awatch

from task_query.cli.app import app
from task_query.cli.commands.query import console, load_query_file, render_result
from task_query.config import TaskQueryConfig, get_config
from task_query.markdown import QueryBlockDetector, load_vault
from task_query.sync import CacheState, CachedResult, InMemoryChangeFeed, QueryResultCache


def _printer(title: str):
    def show(cached: CachedResult) -> None:
        if cached.result is None:
            console.print(f"[yellow]{title}: tasks are {cached.cache_state.value}[/yellow]")
            return
        render_result(cached.result, title)
        console.print()

    return show


async def run_watch(query_file: Path, vault: Path, config: Optional[TaskQueryConfig] = None) -> None:
    """Run the queries in ``query_file`` until SIGINT/SIGTERM.

    It:
    1. Starts one result cache per ```tasks block
    2. Publishes the vault's tasks to the caches
    3. Re-reads the vault whenever a markdown file changes
    """
    config = config or get_config()
    feed = InMemoryChangeFeed()

    tasks_file, text = load_query_file(query_file, vault)
    blocks = QueryBlockDetector.detect_queries(text)
    if not blocks:
        typer.echo(f"No tasks queries found in {query_file}", err=True)
        raise typer.Exit(1)

    caches = [
        QueryResultCache(block.query, tasks_file, feed, _printer(f"Query {index}"), config)
        for index, block in enumerate(blocks, start=1)
    ]

    # --- Signal handling ---
    shutdown_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("Shutdown signal received")
        shutdown_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _signal_handler)

    # --- Run ---
    try:
        for cache in caches:
            await cache.start()
        feed.publish(load_vault(vault), CacheState.WARM)
        logger.info(f"Watching {vault}, press Ctrl+C to stop")

        async for changes in awatch(vault, stop_event=shutdown_event):
            if not any(path.endswith(".md") for _, path in changes):
                continue
            logger.debug(f"{len(changes)} files changed, reloading tasks")
            if query_file.exists():
                new_file, _ = load_query_file(query_file, vault)
                for cache in caches:
                    cache.set_tasks_file(new_file)
            feed.publish(load_vault(vault), CacheState.WARM)
    finally:
        for cache in caches:
            await cache.stop()
        logger.info("Watch stopped")


@app.command()
def watch(
    query_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Markdown file with ```tasks blocks"),
    vault: Optional[Path] = typer.Option(
        None, "--vault", file_okay=False, exists=True, help="Folder of markdown files to watch"
    ),
) -> None:
    """Re-run the queries in QUERY_FILE whenever a markdown file in the vault changes."""
    # On Windows, use SelectorEventLoop to avoid ProactorEventLoop cleanup issues
    if sys.platform == "win32":  # pragma: no cover
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

    asyncio.run(run_watch(query_file, vault or query_file.parent))
