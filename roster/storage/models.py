"""SQLModel table definitions for the SQL storage adapter."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from roster.data_types import Person


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PersonRecord(SQLModel, table=True):  # type: ignore[call-arg]
    """A stored person, unique per (name, parliament)."""

    __tablename__ = "person"
    __table_args__ = (
        sa.UniqueConstraint("name", "parliament", name="uq_person_identity"),
    )

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    parliament: str | None = Field(default=None, index=True)
    # JSON-encoded list of source URLs
    sources_json: str = Field(default="[]")
    updated_at: datetime = Field(default_factory=utcnow)

    @classmethod
    def from_person(cls, person: Person) -> PersonRecord:
        return cls(
            name=person.name,
            parliament=person.parliament,
            sources_json=json.dumps(list(person.sources)),
        )

    def to_person(self) -> Person:
        return Person(
            name=self.name,
            parliament=self.parliament,
            sources=tuple(json.loads(self.sources_json)),
        )
