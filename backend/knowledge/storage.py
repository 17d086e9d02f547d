"""
Persistent storage for the solution knowledge base.

The whole collection lives in one key-value slot as a JSON document (the
same document the JSON export produces). Every mutation rewrites the full
collection. Durability is best-effort: read failures fall back to the seed
collection and write failures are logged, while the in-memory collection
stays authoritative for the running process.
"""

import logging
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union
from uuid import uuid4

from typing_extensions import Protocol

from exporters.json_encoder import decode_json, encode_json

from .models import BusinessArea, NewSolution, SolutionRecord
from .seed import SEED_RECORDS

logger = logging.getLogger(__name__)

STORAGE_KEY = "business-ai-solver-database"


class StoragePort(Protocol):
    """Key-value slot the store persists into."""

    def read(self, key: str) -> Optional[str]:
        ...

    def write(self, key: str, value: str) -> None:
        ...


class InMemoryStorage:
    """Dict-backed storage, used by tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.slots: Dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self.slots.get(key)

    def write(self, key: str, value: str) -> None:
        self.slots[key] = value


class JsonFileStorage:
    """
    One JSON file per key inside a directory.

    Writes go to a temp file first and are moved into place, so a crash
    mid-write never leaves a truncated knowledge base behind.
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_path, self.path_for(key))
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


def new_record_id() -> str:
    return f"sol-{uuid4().hex}"


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC instant with millisecond precision, e.g. 2024-05-20T10:00:00.000Z."""
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


class SolutionStore:
    """
    Owns the ordered, newest-first collection of solution records.

    The store loads itself on construction. Appends and clears run under a
    lock so the read-modify-persist sequence is atomic when the host calls
    in from several threads.
    """

    def __init__(
        self,
        storage: StoragePort,
        seed: Optional[Sequence[SolutionRecord]] = None,
        key: str = STORAGE_KEY,
    ):
        """
        Initialize the store.

        Args:
            storage: Slot the collection is read from and written to
            seed: Fallback collection (default: built-in SEED_RECORDS)
            key: Storage key (default: STORAGE_KEY)
        """
        self._storage = storage
        self._seed: Tuple[SolutionRecord, ...] = tuple(SEED_RECORDS if seed is None else seed)
        self._key = key
        self._lock = threading.RLock()
        self._records: List[SolutionRecord] = []
        self.load()

    def load(self) -> Tuple[SolutionRecord, ...]:
        """
        Read the collection from storage, falling back to the seed.

        Stored records that fail validation are skipped; the seed is used
        only when nothing usable survives.

        Returns:
            The loaded collection, newest first. Never empty unless the seed is.
        """
        records: Optional[List[SolutionRecord]] = None
        try:
            raw = self._storage.read(self._key)
            if raw:
                records = decode_json(raw, skip_invalid=True)
        except Exception as e:
            logger.warning("Failed to load knowledge base from %r, using seed data: %s", self._key, e)
            records = None

        if not records:
            logger.info("No stored knowledge base found; seeding %d records", len(self._seed))
            records = list(self._seed)

        with self._lock:
            self._records = records
            return tuple(self._records)

    def persist(self) -> None:
        """Write the full collection. Failures are logged, never raised."""
        with self._lock:
            document = encode_json(self._records)
        try:
            self._storage.write(self._key, document)
        except Exception as e:
            logger.warning("Failed to save knowledge base to %r: %s", self._key, e)

    def append(self, record: SolutionRecord) -> None:
        """
        Put a record at the front of the collection and persist.

        Raises:
            ValueError: If a record with the same id already exists.
        """
        with self._lock:
            if any(existing.id == record.id for existing in self._records):
                raise ValueError(f"Record id already exists: {record.id}")
            self._records.insert(0, record)
            self.persist()

    def add_solution(self, new: NewSolution, now: Optional[datetime] = None) -> SolutionRecord:
        """Create a record from producer data, assigning id and timestamp, and append it."""
        record = SolutionRecord.from_new(new, record_id=new_record_id(), timestamp=utc_timestamp(now))
        self.append(record)
        logger.info("Stored solution %s for %s / %s", record.id, record.company_type, record.niche)
        return record

    def clear(self) -> None:
        """Drop every record and persist the empty collection."""
        with self._lock:
            self._records = []
            self.persist()

    @property
    def records(self) -> Tuple[SolutionRecord, ...]:
        """Snapshot of the collection, newest first."""
        with self._lock:
            return tuple(self._records)

    def ids(self) -> List[str]:
        return [record.id for record in self.records]

    def get(self, record_id: str) -> Optional[SolutionRecord]:
        for record in self.records:
            if record.id == record_id:
                return record
        return None

    def filter(
        self,
        area: Optional[BusinessArea] = None,
        query: Optional[str] = None,
    ) -> List[SolutionRecord]:
        """
        Records matching a business area and/or a text query.

        Args:
            area: Keep only records from this area
            query: Case-insensitive substring matched against company type,
                   niche and problem description

        Returns:
            Matching records, newest first
        """
        needle = (query or "").strip().lower()
        return [
            record
            for record in self.records
            if (area is None or record.business_area == area)
            and (not needle or needle in _searchable_text(record))
        ]

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[SolutionRecord]:
        return iter(self.records)


def _searchable_text(record: SolutionRecord) -> str:
    return " ".join((record.company_type, record.niche, record.problem_description)).lower()
