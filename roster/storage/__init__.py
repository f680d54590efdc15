"""Storage adapters and the connections that select them."""

from roster.storage.connection import (
    ADAPTERS,
    Connection,
    connect,
    parse_connection_uri,
)
from roster.storage.files import JSONDirectoryAdapter
from roster.storage.mongodb import MongoDBAdapter
from roster.storage.sql import SQLAdapter

__all__ = [
    "ADAPTERS",
    "Connection",
    "JSONDirectoryAdapter",
    "MongoDBAdapter",
    "SQLAdapter",
    "connect",
    "parse_connection_uri",
]
