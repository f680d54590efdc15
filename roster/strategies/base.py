"""Base class for people extraction strategies.

A strategy knows how one era of the source website lays out its member
listing: which pages to fetch, which table rows are data, and which cell holds
the name. Strategies are generators so records reach storage as they are
parsed.
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from typing import ClassVar

from roster.common.document import ParsedDocument
from roster.common.exceptions import (
    HTMLStructuralAssumptionException,
    InvalidConfigError,
    RowParseError,
    UnparsableNameError,
)
from roster.common.fetch_client import FetchClient
from roster.common.names import normalize
from roster.data_types import Person, RowErrorPolicy, ScrapeConfig

PARLIAMENT_KEY = "parliament"


class PeopleStrategy:
    """Base class for strategies that scrape a list of people.

    Subclasses implement scrape(), fetching whatever pages their era needs and
    delegating row handling to extract_people().

    Class Attributes:
        identifier: Registry key for this strategy.
        base_url: Origin of the source website. The ``base_url`` scrape option
            overrides it.
        header_offset: Number of leading table rows that are not data.
        name_column: Zero-based index of the cell holding the name.
    """

    identifier: ClassVar[str] = ""
    base_url: ClassVar[str] = "http://www.parl.gc.ca"
    header_offset: ClassVar[int] = 2
    name_column: ClassVar[int] = 0

    def __init__(
        self,
        client: FetchClient,
        row_error_policy: RowErrorPolicy = RowErrorPolicy.ABORT,
        logger: logging.Logger | None = None,
    ) -> None:
        self.client = client
        self.row_error_policy = row_error_policy
        self.logger = logger or client.logger
        self.skipped_rows: list[RowParseError] = []

    def scrape(self, config: ScrapeConfig) -> Generator[Person, None, None]:
        """Yield every person listed for the configured era."""
        raise NotImplementedError

    def url_for(self, config: ScrapeConfig, path: str) -> str:
        base = config.get("base_url", self.base_url).rstrip("/")
        return f"{base}{path}"

    @staticmethod
    def require_parliament(config: ScrapeConfig) -> str:
        parliament = config.get(PARLIAMENT_KEY, "").strip()
        if not parliament:
            raise InvalidConfigError(
                PARLIAMENT_KEY,
                config.get(PARLIAMENT_KEY),
                "a parliament is required",
            )
        return parliament

    def extract_people(
        self,
        document: ParsedDocument,
        rows_selector: str,
        config: ScrapeConfig,
    ) -> Generator[Person, None, None]:
        """Yield a Person for each data row of a listing table.

        Args:
            document: The listing page.
            rows_selector: Selector for all rows of the listing table, header
                rows included.
            config: The run's scrape options.

        Raises:
            HTMLStructuralAssumptionException: If the listing is missing its
                header rows. A listing with only header rows yields nothing.
            RowParseError: If a row can't be parsed and the policy is ABORT.
        """
        rows = document.query(
            rows_selector,
            "listing header rows",
            min_count=self.header_offset,
        )
        parliament = config.get(PARLIAMENT_KEY)
        if len(rows) == self.header_offset:
            self.logger.warning(
                f"Listing at {document.url} has no data rows",
                extra={"url": document.url},
            )

        for row_index, row in enumerate(
            rows[self.header_offset :], start=self.header_offset
        ):
            try:
                name = self.parse_row(row, row_index)
            except RowParseError as e:
                if self.row_error_policy is RowErrorPolicy.ABORT:
                    raise
                self.skipped_rows.append(e)
                self.logger.warning(
                    f"Skipping row {row_index} of {document.url}: {e.message}",
                    extra={"url": document.url, "row_index": row_index},
                )
                continue

            yield Person(
                name=name, parliament=parliament, sources=(document.url,)
            )

    def parse_row(self, row: ParsedDocument, row_index: int) -> str:
        """Read and normalize the name cell of one row.

        Raises:
            RowParseError: If the cell is missing or the name is unparsable.
        """
        try:
            cells = row.query_xpath(
                "./td", "row cells", min_count=self.name_column + 1
            )
        except HTMLStructuralAssumptionException as e:
            raise RowParseError(
                row_index, row.url, reason="name cell missing"
            ) from e

        raw = cells[self.name_column].text_content()
        try:
            return normalize(raw)
        except UnparsableNameError as e:
            raise RowParseError(
                row_index, row.url, raw_text=raw, reason=str(e)
            ) from e
