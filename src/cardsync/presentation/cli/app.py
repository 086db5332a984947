"""cardsync CLI application using Typer.

``cardsync sync`` runs one card-portal-to-ledger sync. Progress events go
to stderr as JSON lines; the terminal result goes to stdout as a single
JSON document (or a rich summary with ``--human``).

The single-run guard is the ``SyncRunLock`` found on the click context
object. A trigger that invokes ``app`` in-process passes its own lock as
``obj``; a standalone invocation gets a fresh one, so guarding against
concurrent processes stays with whoever spawns them.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Optional

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.table import Table

from cardsync import __version__
from cardsync.application.commands.integration import (
    SyncRunLock,
    TransactionSyncCommand,
)
from cardsync.application.dtos.integration import SyncRunResult, SyncStep
from cardsync.domain.shared.exceptions import ConfigurationError, DomainException
from cardsync.infrastructure.progress import JsonLinesProgressReporter
from cardsync_config import Settings, get_settings

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="cardsync",
    help="cardsync - sync credit card transactions into Lunch Money",
    no_args_is_help=True,
)
console = Console()


def configure_logging(level: str = "INFO") -> None:
    """Configure application logging.

    Logs go to stderr so stdout stays reserved for the result document.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )
    logging.getLogger("cardsync").setLevel(log_level)

    # Quiet down noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("playwright").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def load_settings() -> Settings:
    """Load settings, turning validation problems into a ConfigurationError."""
    try:
        return get_settings()
    except PydanticValidationError as e:
        fields = sorted(
            {str(err["loc"][0]).upper() for err in e.errors() if err.get("loc")},
        )
        msg = (
            "Missing or invalid configuration: "
            f"{', '.join(fields) or 'unknown'}. Check your .env file."
        )
        raise ConfigurationError(msg, fields=fields) from e


def apply_overrides(
    settings: Settings,
    days: Optional[int] = None,
    account: Optional[str] = None,
    headed: bool = False,
) -> Settings:
    update: dict = {}
    if days is not None:
        update["sync_days"] = days
    if account:
        update["ics_account_number"] = account
    if headed:
        update["browser_headless"] = False
    return settings.model_copy(update=update) if update else settings


async def run_sync(
    command: TransactionSyncCommand,
    lock: SyncRunLock,
    reporter: Optional[JsonLinesProgressReporter] = None,
) -> SyncRunResult:
    """Execute a sync while holding the run lock."""
    async with lock.hold():
        try:
            return await command.execute(on_progress=reporter)
        finally:
            await command.close()


def _failure(e: DomainException, step: str) -> SyncRunResult:
    return SyncRunResult.failure(
        error=e.message,
        step=step,
        kind=e.kind,
        retryable=e.retryable,
    )


def _print_human(result: SyncRunResult) -> None:
    if not result.success:
        console.print(
            f"\n[bold red]Sync failed[/bold red] at [cyan]{result.step}[/cyan]",
        )
        console.print(result.error or "")
        return

    table = Table(title="Sync result", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Account", result.account_id or "-")
    table.add_row("Period", f"{result.from_date} to {result.until_date}")
    table.add_row("Fetched", str(result.transactions_count))
    table.add_row("Submitted", str(result.synced_count))
    table.add_row("Inserted", f"[green]{result.inserted_count}[/green]")
    table.add_row("Skipped", f"[yellow]{result.skipped_count}[/yellow]")
    console.print()
    console.print(table)
    console.print(f"[bold green]{result.message}[/bold green]")
    if result.warning:
        console.print(f"[yellow]⚠  {result.warning}[/yellow]")


@app.command("sync")
def sync(
    ctx: typer.Context,
    days: Optional[int] = typer.Option(
        None,
        "--days",
        "-d",
        min=1,
        help="Override SYNC_DAYS (lookback window in days)",
    ),
    account: Optional[str] = typer.Option(
        None,
        "--account",
        "-a",
        help="Override ICS_ACCOUNT_NUMBER",
    ),
    headed: bool = typer.Option(
        False,
        "--headed",
        help="Show the browser window (useful when the login page changes)",
    ),
    human: bool = typer.Option(
        False,
        "--human",
        help="Print a readable summary instead of the JSON result",
    ),
) -> None:
    """Fetch card transactions and upload them to Lunch Money."""
    reporter = JsonLinesProgressReporter()
    try:
        settings = apply_overrides(load_settings(), days, account, headed)
    except ConfigurationError as e:
        configure_logging()
        logger.error("Configuration invalid: %s", e.message)
        result = _failure(e, SyncStep.VALIDATION)
    else:
        configure_logging(settings.log_level)
        command = TransactionSyncCommand.from_settings(settings)
        try:
            lock = ctx.ensure_object(SyncRunLock)
            result = asyncio.run(run_sync(command, lock, reporter))
        except DomainException as e:
            # Lock contention; the run itself never raises
            result = _failure(e, SyncStep.SYNC_START)

    if human:
        _print_human(result)
    else:
        typer.echo(json.dumps(result.to_dict()))

    if not result.success:
        raise typer.Exit(code=1)


@app.command("version")
def version() -> None:
    """Print the installed cardsync version."""
    console.print(f"cardsync {__version__}")


def cli() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    cli()
