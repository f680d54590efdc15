"""Data types shared by strategies, the runner, and storage adapters.

These types are designed to be:

1. Immutable - Person is a frozen pydantic model, ScrapeConfig a read-only
   mapping, and run results frozen dataclasses
2. Serializable - Person round-trips through JSON for the file adapter
3. Exhaustive - RunResult is a closed union meant for ``match`` statements
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# =============================================================================
# Records
# =============================================================================


class Person(BaseModel):
    """A legislator scraped from a listing row.

    Attributes:
        name: Normalized "First Last" name. Never empty.
        parliament: The parliament the listing was filtered by, if any.
        sources: URLs the record was read from.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Normalized 'First Last' name")
    parliament: str | None = Field(
        None, description="Parliament the record was scraped for"
    )
    sources: tuple[str, ...] = Field(
        default=(), description="URLs the record was read from"
    )

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be empty")
        return value

    def fingerprint(self) -> dict[str, Any]:
        """Fields that identify this record for upserting backends."""
        return {"name": self.name, "parliament": self.parliament}


# =============================================================================
# Run configuration
# =============================================================================


class ScrapeConfig(Mapping[str, str]):
    """Read-only mapping of scrape options supplied at invocation.

    ``parliament`` selects the strategy and parameterizes the fetch. Any
    other option is passed to the selected strategy unmodified.

    Example::

        config = ScrapeConfig({"parliament": "37"})
        config = ScrapeConfig.from_pairs(["parliament", "37"])
    """

    def __init__(self, options: Mapping[str, Any] | None = None) -> None:
        self._options: Mapping[str, str] = MappingProxyType(
            {str(key): str(value) for key, value in (options or {}).items()}
        )

    @classmethod
    def from_pairs(cls, items: Iterable[str]) -> ScrapeConfig:
        """Build a config from a flat ``key value key value`` sequence.

        Raises:
            ValueError: If a key has no value.
        """
        items = list(items)
        if len(items) % 2:
            raise ValueError(
                f"Criteria must be key/value pairs, got {len(items)} items"
            )
        return cls(dict(zip(items[::2], items[1::2])))

    def __getitem__(self, key: str) -> str:
        return self._options[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._options)

    def __len__(self) -> int:
        return len(self._options)

    def __repr__(self) -> str:
        return f"ScrapeConfig({dict(self._options)!r})"


class RowErrorPolicy(Enum):
    """What a strategy does when one row can't be parsed.

    Values:
        ABORT: Raise RowParseError and end the run.
        SKIP: Log the error, count the row as skipped, and continue.
    """

    ABORT = "abort"
    SKIP = "skip"


@dataclass(frozen=True)
class ConnectionDescriptor:
    """Identifies a storage backend instance.

    Attributes:
        scheme: Selects the adapter (e.g. "mongodb").
        address: Where the backend lives (host:port, file path, directory).
        options: Adapter-specific options.
    """

    scheme: str
    address: str
    options: dict[str, Any] = field(default_factory=dict)


# =============================================================================
# Run results
# =============================================================================


@dataclass(frozen=True)
class Completed:
    """A run that reached the end of its strategy or was cancelled.

    Attributes:
        count: Records dispatched to the connection.
        skipped_rows: Rows skipped under RowErrorPolicy.SKIP.
        cancelled: True if the stop event ended the run early.
    """

    count: int
    skipped_rows: int = 0
    cancelled: bool = False


@dataclass(frozen=True)
class Failed:
    """A run ended by an error from any stage.

    Attributes:
        error: The exception that ended the run.
        task: The requested task.
        strategy: Identifier of the selected strategy, if selection succeeded.
        count: Records dispatched before the failure.
        context: Diagnostic details (url, row_index, ...).
    """

    error: Exception
    task: str
    strategy: str | None = None
    count: int = 0
    context: dict[str, Any] = field(default_factory=dict)


RunResult = Completed | Failed
