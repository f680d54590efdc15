"""MongoDB storage adapter.

Records are upserted into the ``people`` collection, keyed by fingerprint,
so re-running a scrape updates existing documents instead of duplicating
them. MongoClient connects lazily; constructing the adapter does not touch
the network.
"""

from __future__ import annotations

import logging
from typing import Any

from pymongo import ASCENDING, MongoClient, ReturnDocument

from roster.data_types import Person

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = "roster"
COLLECTION = "people"


class MongoDBAdapter:
    """Persists people to a MongoDB database.

    Example::

        adapter = MongoDBAdapter("localhost:27017", {"database": "roster"})
        adapter.save(Person(name="John Smith"))
    """

    def __init__(self, address: str, options: dict[str, Any]) -> None:
        """Initialize the adapter.

        Args:
            address: ``host:port`` of the MongoDB server.
            options: ``database`` selects the database (default "roster");
                every other option is passed to MongoClient.
        """
        self.address = address
        self.options = options
        self.database_name = options.get("database", DEFAULT_DATABASE)

        client_options = {
            key: value for key, value in options.items() if key != "database"
        }
        self.client: MongoClient = MongoClient(
            f"mongodb://{address}", **client_options
        )
        self.collection = self.client[self.database_name][COLLECTION]
        self._indexed = False

    def _ensure_index(self) -> None:
        if self._indexed:
            return
        self.collection.create_index(
            [("name", ASCENDING), ("parliament", ASCENDING)]
        )
        self._indexed = True

    def save(self, person: Person) -> str:
        """Insert or update the document for this person.

        Returns:
            The document's ``_id`` as a string.
        """
        self._ensure_index()
        document = self.collection.find_one_and_update(
            person.fingerprint(),
            {"$set": person.model_dump(mode="json")},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        logger.debug(
            f"Saved {person.name} to {self.database_name}.{COLLECTION}",
            extra={"id": str(document["_id"])},
        )
        return str(document["_id"])

    def close(self) -> None:
        self.client.close()
