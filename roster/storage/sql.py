"""SQLite storage adapter built on SQLModel.

The address is a database file path, or ``:memory:`` for a throwaway
database. Tables are created on connect.
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, select

from roster.data_types import Person
from roster.storage.models import PersonRecord, utcnow

logger = logging.getLogger(__name__)


class SQLAdapter:
    """Persists people to a SQLite database.

    Example::

        adapter = SQLAdapter("people.db", {})
        adapter.save(Person(name="John Smith", parliament="37"))
    """

    def __init__(self, address: str, options: dict[str, Any]) -> None:
        """Initialize the adapter and create tables.

        Args:
            address: Path of the SQLite file, or ``:memory:``.
            options: ``echo`` enables SQL statement logging.
        """
        self.address = address
        self.options = options

        engine_kwargs: dict[str, Any] = {
            "echo": bool(options.get("echo", False)),
            "connect_args": {"check_same_thread": False},
        }
        if address == ":memory:":
            # Every connection would otherwise get its own empty database
            engine_kwargs["poolclass"] = StaticPool

        self.engine = create_engine(f"sqlite:///{address}", **engine_kwargs)
        SQLModel.metadata.create_all(
            self.engine,
            tables=[PersonRecord.__table__],  # type: ignore[list-item]
        )

    def save(self, person: Person) -> str:
        """Insert or update the row for this person.

        Returns:
            The row id as a string.
        """
        with Session(self.engine) as session:
            statement = select(PersonRecord).where(
                PersonRecord.name == person.name,
                # None compiles to IS NULL
                PersonRecord.parliament == person.parliament,
            )
            record = session.exec(statement).first()
            if record is None:
                record = PersonRecord.from_person(person)
            else:
                record.sources_json = PersonRecord.from_person(
                    person
                ).sources_json
                record.updated_at = utcnow()
            session.add(record)
            session.commit()
            session.refresh(record)
            logger.debug(
                f"Saved {person.name} as person {record.id}",
                extra={"id": record.id},
            )
            return str(record.id)

    def load(self) -> Generator[Person, None, None]:
        """Yield every stored person in insertion order."""
        with Session(self.engine) as session:
            statement = select(PersonRecord).order_by(PersonRecord.id)
            for record in session.exec(statement):
                yield record.to_person()

    def close(self) -> None:
        self.engine.dispose()
