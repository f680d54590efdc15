"""Storage connections.

A Connection wraps the storage adapter selected by a connection scheme.
Adapter selection is a pure lookup; constructing a Connection builds the
adapter as ``AdapterClass(address, options)``.

Schemes:

- ``mongodb``: MongoDBAdapter, address ``host:port``
- ``sqlite``: SQLAdapter, address is a file path or ``:memory:``
- ``file``: JSONDirectoryAdapter, address is a directory
"""

from __future__ import annotations

from collections.abc import Generator
from typing import Any, Protocol
from urllib.parse import parse_qsl, urlsplit

from roster.common.exceptions import UnsupportedBackendError
from roster.data_types import ConnectionDescriptor, Person
from roster.storage.files import JSONDirectoryAdapter
from roster.storage.mongodb import MongoDBAdapter
from roster.storage.sql import SQLAdapter


class StorageAdapter(Protocol):
    """What a Connection needs from a backend."""

    def save(self, person: Person) -> str: ...

    def close(self) -> None: ...


ADAPTERS: dict[str, type] = {
    "mongodb": MongoDBAdapter,
    "sqlite": SQLAdapter,
    "file": JSONDirectoryAdapter,
}

# Schemes whose address is a filesystem path rather than a network location
_PATH_SCHEMES = {"sqlite", "file"}


def adapter_class(scheme: str) -> type:
    """Return the adapter class registered for a scheme.

    Raises:
        UnsupportedBackendError: If no adapter handles ``scheme``.
    """
    try:
        return ADAPTERS[scheme]
    except KeyError:
        raise UnsupportedBackendError(scheme, sorted(ADAPTERS)) from None


def parse_connection_uri(uri: str) -> ConnectionDescriptor:
    """Split a connection URI into scheme, address, and options.

    Query parameters become options. For ``mongodb`` URIs, a path names the
    database. For path schemes, ``sqlite:///people.db`` is the relative path
    ``people.db`` and ``sqlite:////var/people.db`` is absolute.

    Example::

        descriptor = parse_connection_uri("mongodb://localhost:27017/roster")
        descriptor.address  # 'localhost:27017'
        descriptor.options  # {'database': 'roster'}

    Raises:
        ValueError: If the URI has no scheme or no address.
    """
    parts = urlsplit(uri)
    if not parts.scheme:
        raise ValueError(f"Connection URI '{uri}' has no scheme")

    options: dict[str, Any] = dict(parse_qsl(parts.query))

    if parts.scheme in _PATH_SCHEMES:
        address = parts.netloc + parts.path
        if not parts.netloc and address.startswith("/"):
            address = address[1:]
    else:
        address = parts.netloc
        database = parts.path.strip("/")
        if database:
            options.setdefault("database", database)

    if not address:
        raise ValueError(f"Connection URI '{uri}' has no address")

    return ConnectionDescriptor(
        scheme=parts.scheme, address=address, options=options
    )


class Connection:
    """A connection to the storage backend selected by ``scheme``.

    Example::

        with Connection("mongodb", "localhost:27017") as connection:
            connection.save(Person(name="John Smith"))
    """

    def __init__(
        self,
        scheme: str,
        address: str,
        options: dict[str, Any] | None = None,
    ) -> None:
        """Build the adapter for ``scheme``.

        Raises:
            UnsupportedBackendError: If no adapter handles ``scheme``.
        """
        self.descriptor = ConnectionDescriptor(
            scheme=scheme, address=address, options=options or {}
        )
        self.adapter: StorageAdapter = adapter_class(scheme)(
            address, options or {}
        )

    @classmethod
    def from_uri(cls, uri: str) -> Connection:
        descriptor = parse_connection_uri(uri)
        return cls(descriptor.scheme, descriptor.address, descriptor.options)

    def save(self, person: Person) -> str:
        """Persist one record and return its backend id."""
        return self.adapter.save(person)

    def load(self) -> Generator[Person, None, None]:
        """Yield stored records, for adapters that can read back.

        Raises:
            NotImplementedError: If the adapter is write-only.
        """
        load = getattr(self.adapter, "load", None)
        if load is None:
            raise NotImplementedError(
                f"'{self.descriptor.scheme}' connections can't be read back"
            )
        yield from load()

    def clear(self) -> int:
        """Delete every stored record, for adapters that support it.

        Returns:
            The number of records deleted.

        Raises:
            NotImplementedError: If the adapter can't be cleared.
        """
        clear = getattr(self.adapter, "clear", None)
        if clear is None:
            raise NotImplementedError(
                f"'{self.descriptor.scheme}' connections can't be cleared"
            )
        return clear()

    def close(self) -> None:
        self.adapter.close()

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"Connection({self.descriptor.scheme!r}, "
            f"{self.descriptor.address!r})"
        )


def connect(
    scheme: str, address: str, options: dict[str, Any] | None = None
) -> Connection:
    """Open a connection to the backend for ``scheme``."""
    return Connection(scheme, address, options)
