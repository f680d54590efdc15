"""Run settings shared by the CLI and programmatic callers.

RunSettings validates the knobs a run needs beyond its scrape options: which
actions to perform, where scraped JSON goes, which database to import into,
and how patient the fetch client is.
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from roster.common.exceptions import UnsupportedBackendError
from roster.data_types import RowErrorPolicy
from roster.storage.connection import adapter_class, parse_connection_uri


class Action(str, Enum):
    """Stages of a run.

    Values:
        SCRAPE: Fetch pages and write records as JSON to the output directory.
        IMPORT: Load the output directory's records into the database.
    """

    SCRAPE = "scrape"
    IMPORT = "import"


DEFAULT_DATABASE_URI = "mongodb://localhost:27017/roster"


class RunSettings(BaseModel):
    """Validated settings for one invocation.

    Attributes:
        actions: Stages to run, in order.
        output_dir: Directory the scrape action writes JSON records to.
        database_uri: Connection URI the import action saves into.
        timeout: Fetch timeout in seconds.
        retries: Extra fetch attempts for transient failures.
        row_error_policy: What to do with unparsable rows.
    """

    actions: list[Action] = Field(
        default_factory=lambda: [Action.SCRAPE, Action.IMPORT]
    )
    output_dir: Path = Path("_data")
    database_uri: str = DEFAULT_DATABASE_URI
    timeout: float = Field(30.0, gt=0)
    retries: int = Field(0, ge=0)
    row_error_policy: RowErrorPolicy = RowErrorPolicy.ABORT

    @field_validator("actions")
    @classmethod
    def _ordered_actions(cls, value: list[Action]) -> list[Action]:
        if not value:
            raise ValueError("at least one action is required")
        # Scrape always runs before import, whatever order they were given in
        return [action for action in Action if action in value]

    @field_validator("database_uri")
    @classmethod
    def _known_backend(cls, value: str) -> str:
        descriptor = parse_connection_uri(value)
        try:
            adapter_class(descriptor.scheme)
        except UnsupportedBackendError as e:
            raise ValueError(str(e)) from e
        return value
