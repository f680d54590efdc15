"""Runner: drives one scrape from task name to stored records.

The runner holds its collaborators (selector, fetch client, connection)
rather than inheriting behavior from them:

    select strategy -> scrape -> save each Person, in extraction order

A run ends in one of two terminal states. Completed carries the dispatched
count (and whether a stop event cut the run short); Failed carries the error
and the context needed to diagnose it: task, strategy, URL, row index. The
runner never retries. Retries belong to the fetch client.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from roster.common.exceptions import (
    FetchError,
    RowParseError,
    ScraperAssumptionException,
)
from roster.common.fetch_client import FetchClient
from roster.data_types import (
    Completed,
    Failed,
    RowErrorPolicy,
    RunResult,
    ScrapeConfig,
)
from roster.selector import StrategySelector
from roster.storage.connection import Connection

logger = logging.getLogger(__name__)


def error_context(error: Exception) -> dict[str, Any]:
    """Pull diagnostic fields out of a pipeline exception."""
    context: dict[str, Any] = {"error_type": type(error).__name__}
    match error:
        case RowParseError():
            context["url"] = error.request_url
            context["row_index"] = error.row_index
            if error.raw_text is not None:
                context["raw_text"] = error.raw_text
        case ScraperAssumptionException():
            context["url"] = error.request_url
            context.update(error.context)
        case FetchError():
            context["url"] = error.url
            if error.status_code is not None:
                context["status_code"] = error.status_code
    return context


class Runner:
    """Runs scraping tasks and dispatches records to a connection.

    Example::

        with FetchClient(logging.getLogger("roster.fetch")) as client:
            with Connection("sqlite", "people.db") as connection:
                runner = Runner(StrategySelector(), client, connection)
                config = ScrapeConfig({"parliament": "37"})
                result = runner.run("people", config)
    """

    def __init__(
        self,
        selector: StrategySelector,
        fetch_client: FetchClient,
        connection: Connection,
        row_error_policy: RowErrorPolicy = RowErrorPolicy.ABORT,
        logger: logging.Logger | None = None,
        on_run_start: Callable[[str, str], None] | None = None,
        on_run_complete: Callable[[str, RunResult], None] | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            selector: Resolves a task and config to a strategy.
            fetch_client: Passed to the strategy for all page fetches.
            connection: Receives every scraped record.
            row_error_policy: Whether unparsable rows abort the run (default)
                or are skipped and counted.
            logger: Logger for run progress. Defaults to this module's logger.
            on_run_start: Called with (task, strategy identifier) once the
                strategy is selected.
            on_run_complete: Called with (task, result) when the run ends.
        """
        self.selector = selector
        self.fetch_client = fetch_client
        self.connection = connection
        self.row_error_policy = row_error_policy
        self.logger = logger or logging.getLogger(__name__)
        self.on_run_start = on_run_start
        self.on_run_complete = on_run_complete

    def run(
        self,
        task: str,
        config: ScrapeConfig | None = None,
        stop_event: threading.Event | None = None,
    ) -> RunResult:
        """Scrape ``task`` and save every record.

        Args:
            task: Task name, e.g. "people".
            config: Scrape options. Unrecognized options reach the strategy
                unmodified.
            stop_event: When set, the run stops after the record being
                dispatched and completes with ``cancelled=True``.

        Returns:
            Completed or Failed. Errors are reported, not raised.
        """
        config = config if config is not None else ScrapeConfig()
        identifier: str | None = None
        count = 0

        try:
            identifier, strategy_class = self.selector.resolve(task, config)
            self.logger.info(
                f"Running task '{task}' with strategy '{identifier}'",
                extra={"task": task, "strategy": identifier},
            )
            if self.on_run_start:
                self.on_run_start(task, identifier)

            strategy = strategy_class(
                self.fetch_client,
                row_error_policy=self.row_error_policy,
                logger=self.logger,
            )

            cancelled = bool(stop_event and stop_event.is_set())
            if not cancelled:
                people = strategy.scrape(config)
                try:
                    for person in people:
                        self.connection.save(person)
                        count += 1
                        if stop_event and stop_event.is_set():
                            cancelled = True
                            break
                finally:
                    people.close()

            result: RunResult = Completed(
                count=count,
                skipped_rows=len(strategy.skipped_rows),
                cancelled=cancelled,
            )
        except Exception as e:
            result = Failed(
                error=e,
                task=task,
                strategy=identifier,
                count=count,
                context=error_context(e),
            )

        self._report(task, result)
        if self.on_run_complete:
            self.on_run_complete(task, result)
        return result

    def _report(self, task: str, result: RunResult) -> None:
        match result:
            case Completed(cancelled=True):
                self.logger.warning(
                    f"Task '{task}' cancelled after {result.count} records",
                    extra={"task": task, "count": result.count},
                )
            case Completed():
                self.logger.info(
                    f"Task '{task}' completed: {result.count} records, "
                    f"{result.skipped_rows} rows skipped",
                    extra={
                        "task": task,
                        "count": result.count,
                        "skipped_rows": result.skipped_rows,
                    },
                )
            case Failed():
                self.logger.error(
                    f"Task '{task}' failed (strategy: {result.strategy}) "
                    f"after {result.count} records: {result.error}",
                    extra={
                        "task": task,
                        "strategy": result.strategy,
                        "count": result.count,
                        **result.context,
                    },
                )


def import_directory(source: Connection, target: Connection) -> int:
    """Copy every record stored in ``source`` into ``target``.

    Used by the import action to load a previous scrape's JSON files into a
    database.

    Returns:
        Number of records saved to ``target``.
    """
    count = 0
    for person in source.load():
        target.save(person)
        count += 1
    logger.info(
        f"Imported {count} records from {source!r} into {target!r}",
        extra={"count": count},
    )
    return count
