"""JSON-file-backed collection store."""

import json
import logging
import os
import tempfile
import threading
from collections.abc import Callable, Mapping
from contextlib import suppress
from dataclasses import dataclass, field
from pathlib import Path

from commission_desk.domain.errors import WriteFailedError
from commission_desk.domain.records import COLLECTIONS, utc_timestamp
from commission_desk.services.store import CollectionStore, Record

logger = logging.getLogger(__name__)


@dataclass
class JsonFileCollectionStore(CollectionStore):
    """Stores each collection as one JSON array file under ``data_dir``.

    Every read-modify-write cycle holds the collection's lock, so concurrent
    appends or patches against the same file never interleave. Files are
    replaced atomically, so a crash mid-write leaves the previous version.
    """

    data_dir: Path
    collections: tuple[str, ...] = COLLECTIONS
    clock: Callable[[], str] = utc_timestamp
    _locks: dict[str, threading.Lock] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.data_dir = Path(self.data_dir)
        self._locks = {name: threading.Lock() for name in self.collections}

    def ensure_ready(self) -> None:
        """Create the data directory and an empty file per collection."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        for name in self.collections:
            path = self._path(name)
            if not path.exists():
                path.write_text("[]", encoding="utf-8")

    def read_collection(self, name: str) -> list[Record]:
        """Return the collection, or an empty list if the file is unusable."""
        with self._lock(name):
            return self._read(name)

    def write_collection(self, name: str, records: list[Record]) -> None:
        """Replace the collection file with ``records``."""
        with self._lock(name):
            self._write(name, records)

    def append_record(self, name: str, record: Record) -> Record:
        """Insert ``record`` at the head of the collection."""
        with self._lock(name):
            records = self._read(name)
            records.insert(0, record)
            self._write(name, records)
        return record

    def update_record(
        self,
        name: str,
        record_id: str,
        patch: Mapping[str, object],
        validate: Callable[[Record], None] | None = None,
    ) -> Record | None:
        """Merge ``patch`` into the matching record; None if the id is unknown."""
        with self._lock(name):
            records = self._read(name)
            for index, current in enumerate(records):
                if current.get("id") != record_id:
                    continue
                if validate is not None:
                    validate(current)
                updated = {**current, **patch, "updatedAt": self.clock()}
                records[index] = updated
                self._write(name, records)
                return updated
        return None

    def _lock(self, name: str) -> threading.Lock:
        try:
            return self._locks[name]
        except KeyError:
            raise ValueError(f"Unknown collection: {name}") from None

    def _path(self, name: str) -> Path:
        return self.data_dir / f"{name}.json"

    def _read(self, name: str) -> list[Record]:
        path = self._path(name)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError:
            logger.warning("Failed to read collection", extra={"collection": name})
            return []
        try:
            data = json.loads(raw or "[]")
        except json.JSONDecodeError:
            logger.warning("Collection file is corrupt", extra={"collection": name})
            return []
        if not isinstance(data, list):
            logger.warning("Collection file is not a list", extra={"collection": name})
            return []
        return [item for item in data if isinstance(item, dict)]

    def _write(self, name: str, records: list[Record]) -> None:
        path = self._path(name)
        text = json.dumps(records, indent=2, ensure_ascii=False)
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=str(self.data_dir), prefix=path.name + ".", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            logger.exception("Failed to write collection", extra={"collection": name})
            raise WriteFailedError(f"Could not save {name}") from exc
        finally:
            if tmp_name is not None:
                with suppress(OSError):
                    os.remove(tmp_name)
