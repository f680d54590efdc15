"""Roster CLI: scrape members of parliament and import them into storage.

Usage:
    roster tasks                                # List tasks and strategies
    roster run people                           # Scrape current members
    roster run people parliament 12             # Scrape the 12th parliament
    roster run people parliament 37 --action scrape
    roster run people --action import --database sqlite:///people.db
"""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager

import click
from pydantic import ValidationError
from pymongo.errors import PyMongoError
from sqlalchemy.exc import SQLAlchemyError

from roster.common.exceptions import UnsupportedBackendError
from roster.common.fetch_client import FetchClient
from roster.data_types import (
    Completed,
    Failed,
    RowErrorPolicy,
    ScrapeConfig,
)
from roster.runner import Runner, import_directory
from roster.selector import (
    MODERN_ERA_THRESHOLD,
    PEOPLE_TASK,
    StrategySelector,
)
from roster.settings import DEFAULT_DATABASE_URI, Action, RunSettings
from roster.storage import Connection
from roster.strategies import Parl1stTo35thStrategy, Parl36thToDateStrategy

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(package_name="roster")
def cli() -> None:
    """Roster: members-of-parliament scraper CLI."""


@cli.command("tasks")
def list_tasks() -> None:
    """List runnable tasks and the strategies they resolve to."""
    selector = StrategySelector()
    for task in selector.tasks():
        click.echo(task)
        if task == PEOPLE_TASK:
            click.echo(
                f"  parliament >= {MODERN_ERA_THRESHOLD} or unset -> "
                f"{Parl36thToDateStrategy.identifier}"
            )
            click.echo(
                f"  parliament <  {MODERN_ERA_THRESHOLD}          -> "
                f"{Parl1stTo35thStrategy.identifier}"
            )
        elif task in selector.registry:
            strategy_class = selector.registry.get(task)
            click.echo(f"  -> {strategy_class.__name__}")


@contextmanager
def _stop_on_sigint(stop_event: threading.Event) -> Iterator[None]:
    """Set ``stop_event`` on Ctrl-C for the duration of the block.

    Signal handlers can only be installed from the main thread; elsewhere the
    block runs without one.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handler(signum: int, frame: object) -> None:
        logger.warning("Interrupted; stopping after the current record")
        stop_event.set()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


@cli.command()
@click.argument("task")
@click.argument("criteria", nargs=-1)
@click.option(
    "--action",
    "actions",
    type=click.Choice([action.value for action in Action]),
    multiple=True,
    envvar="ROSTER_ACTION",
    help="Stage to run; repeat for both. [default: scrape, import]",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False),
    default="_data",
    show_default=True,
    envvar="ROSTER_OUTPUT_DIR",
    help="Directory scraped records are written to as JSON.",
)
@click.option(
    "--database",
    "database_uri",
    default=DEFAULT_DATABASE_URI,
    show_default=True,
    envvar="ROSTER_DATABASE",
    help="Connection URI the import action saves into.",
)
@click.option(
    "--timeout",
    type=float,
    default=30.0,
    show_default=True,
    envvar="ROSTER_TIMEOUT",
    help="Request timeout in seconds.",
)
@click.option(
    "--retries",
    type=int,
    default=0,
    show_default=True,
    envvar="ROSTER_RETRIES",
    help="Extra attempts for network errors and 5xx responses.",
)
@click.option(
    "--skip-bad-rows",
    is_flag=True,
    envvar="ROSTER_SKIP_BAD_ROWS",
    help="Skip rows whose name can't be parsed instead of failing.",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
def run(
    task: str,
    criteria: tuple[str, ...],
    actions: tuple[str, ...],
    output_dir: str,
    database_uri: str,
    timeout: float,
    retries: int,
    skip_bad_rows: bool,
    verbose: bool,
) -> None:
    """Scrape TASK and import the results.

    CRITERIA are scrape options given as KEY VALUE pairs.

    \b
    Examples:
        roster run people
        roster run people parliament 12
        roster run people parliament 37 --action scrape --output-dir out
        roster run people --action import --database sqlite:///people.db
    """
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = ScrapeConfig.from_pairs(criteria)
    except ValueError as e:
        raise click.BadParameter(
            f"{e}. Expected KEY VALUE pairs, e.g. 'parliament 37'",
            param_hint="CRITERIA",
        ) from e

    settings_kwargs: dict[str, object] = {
        "output_dir": output_dir,
        "database_uri": database_uri,
        "timeout": timeout,
        "retries": retries,
        "row_error_policy": (
            RowErrorPolicy.SKIP if skip_bad_rows else RowErrorPolicy.ABORT
        ),
    }
    if actions:
        settings_kwargs["actions"] = list(actions)
    try:
        settings = RunSettings(**settings_kwargs)
    except ValidationError as e:
        raise click.BadParameter(str(e)) from e

    if Action.SCRAPE in settings.actions:
        _scrape(task, config, settings)
    if Action.IMPORT in settings.actions:
        _import(settings)


def _scrape(task: str, config: ScrapeConfig, settings: RunSettings) -> None:
    click.echo(f"Task:   {task} {dict(config)}")
    click.echo(f"Output: {settings.output_dir}")

    stop_event = threading.Event()
    with (
        FetchClient(
            logging.getLogger("roster.fetch"),
            timeout=settings.timeout,
            retries=settings.retries,
        ) as client,
        Connection("file", str(settings.output_dir)) as connection,
        _stop_on_sigint(stop_event),
    ):
        # The import action replays the whole directory, so a scrape starts
        # from an empty one.
        connection.clear()
        runner = Runner(
            StrategySelector(),
            client,
            connection,
            row_error_policy=settings.row_error_policy,
        )
        result = runner.run(task, config, stop_event=stop_event)

    match result:
        case Failed():
            raise click.ClickException(
                f"Task '{task}' failed after {result.count} records: "
                f"{result.error}"
            )
        case Completed(cancelled=True):
            click.echo(f"Cancelled after {result.count} records.")
        case Completed():
            click.echo(
                f"Scraped {result.count} records "
                f"({result.skipped_rows} rows skipped)."
            )


def _import(settings: RunSettings) -> None:
    click.echo(f"Database: {settings.database_uri}")
    try:
        with (
            Connection("file", str(settings.output_dir)) as source,
            Connection.from_uri(settings.database_uri) as target,
        ):
            count = import_directory(source, target)
    except (
        PyMongoError,
        SQLAlchemyError,
        UnsupportedBackendError,
        OSError,
        ValueError,
    ) as e:
        raise click.ClickException(
            f"Import into {settings.database_uri} failed: "
            f"{type(e).__name__}: {e}"
        ) from e
    click.echo(f"Imported {count} records.")


def main() -> None:
    """Entry point for the ``roster`` console script."""
    cli()
