"""Persistence interface for record collections."""

from collections.abc import Callable, Mapping
from typing import Protocol

Record = dict[str, object]


class CollectionStore(Protocol):
    """Named, ordered collections of JSON records (newest first)."""

    def read_collection(self, name: str) -> list[Record]:
        """Return every record in the collection, newest first."""

    def write_collection(self, name: str, records: list[Record]) -> None:
        """Replace the whole collection."""

    def append_record(self, name: str, record: Record) -> Record:
        """Insert a record at the head of the collection and return it."""

    def update_record(
        self,
        name: str,
        record_id: str,
        patch: Mapping[str, object],
        validate: Callable[[Record], None] | None = None,
    ) -> Record | None:
        """Merge ``patch`` into a record, stamp ``updatedAt`` and return it."""
