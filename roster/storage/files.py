"""JSON directory storage adapter.

The scrape action writes each record to its own JSON file so that a scrape
can be inspected, diffed, or imported into a database later. The file name is
derived from the record's fingerprint, so re-scraping overwrites instead of
duplicating.

File names are hashes, so the order records were saved in is kept in a
separate ``_order.txt`` manifest, one file name per line.
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Generator
from pathlib import Path
from typing import Any

from roster.data_types import Person

logger = logging.getLogger(__name__)

PERSON_GLOB = "person_*.json"
ORDER_FILE = "_order.txt"


def _fingerprint_key(person: Person) -> str:
    encoded = json.dumps(person.fingerprint(), sort_keys=True).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()[:16]


class JSONDirectoryAdapter:
    """Stores one JSON file per person in a directory.

    Example::

        adapter = JSONDirectoryAdapter("_data", {})
        adapter.clear()
        adapter.save(Person(name="John Smith"))
        list(adapter.load())
    """

    def __init__(self, address: str, options: dict[str, Any]) -> None:
        """Initialize the adapter, creating the directory if needed.

        Args:
            address: Directory to write into.
            options: ``indent`` sets JSON indentation (default 2).
        """
        self.address = address
        self.options = options
        self.directory = Path(address)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.indent = int(options.get("indent", 2))
        self._order_path = self.directory / ORDER_FILE
        self._ordered = set(self._read_order())

    def path_for(self, person: Person) -> Path:
        return self.directory / f"person_{_fingerprint_key(person)}.json"

    def save(self, person: Person) -> str:
        """Write the person's JSON file.

        A re-saved identity keeps the position of its first save.

        Returns:
            The file name, which serves as the record id.
        """
        path = self.path_for(person)
        path.write_text(
            person.model_dump_json(indent=self.indent), encoding="utf-8"
        )
        if path.name not in self._ordered:
            with self._order_path.open("a", encoding="utf-8") as f:
                f.write(f"{path.name}\n")
            self._ordered.add(path.name)
        logger.debug(f"Wrote {person.name} to {path}")
        return path.name

    def load(self) -> Generator[Person, None, None]:
        """Yield every stored person in the order they were saved.

        Person files missing from the manifest follow, ordered by file name.
        """
        present = {path.name for path in self.directory.glob(PERSON_GLOB)}
        ordered = [name for name in self._read_order() if name in present]
        rest = sorted(present.difference(ordered))
        for name in ordered + rest:
            path = self.directory / name
            yield Person.model_validate_json(path.read_text(encoding="utf-8"))

    def clear(self) -> int:
        """Delete every stored person and the manifest.

        Other files in the directory are left alone.

        Returns:
            The number of person files deleted.
        """
        removed = 0
        for path in self.directory.glob(PERSON_GLOB):
            path.unlink()
            removed += 1
        self._order_path.unlink(missing_ok=True)
        self._ordered.clear()
        if removed:
            logger.info(
                f"Removed {removed} records from {self.directory}",
                extra={"directory": str(self.directory), "removed": removed},
            )
        return removed

    def _read_order(self) -> list[str]:
        if not self._order_path.exists():
            return []
        seen: dict[str, None] = {}
        for line in self._order_path.read_text(encoding="utf-8").splitlines():
            if line:
                seen.setdefault(line, None)
        return list(seen)

    def close(self) -> None:
        pass
