"""
Record Store - Generic persistence for profiles and notifications.

Any backend offering create / find_by_id / update / list_all satisfies the
RecordStore protocol. Absence is a normal return value (None); an unreachable
or corrupt backend raises StoreUnavailableError.
"""

import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from app.services.pharmacogenomics.config import StorageConfig, get_config, resolve_backend_path

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class StoreUnavailableError(RuntimeError):
    """The backing store could not be reached or returned unusable data."""


@runtime_checkable
class RecordStore(Protocol):
    def create(self, record: Record) -> Record:
        ...

    def find_by_id(self, record_id: str) -> Optional[Record]:
        ...

    def update(self, record_id: str, fields: Record) -> Optional[Record]:
        ...

    def list_all(self) -> List[Record]:
        """All records, most recently created first."""
        ...


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _stamp_new(record: Record) -> Record:
    now = utc_now_iso()
    stamped = dict(record)
    stamped.setdefault("id", str(uuid.uuid4()))
    stamped.setdefault("created_at", now)
    stamped["updated_at"] = now
    return stamped


def _newest_first(records: List[Record]) -> List[Record]:
    # reversed() first so records created in the same instant stay newest-first
    return sorted(reversed(records), key=lambda r: r.get("created_at", ""), reverse=True)


class InMemoryRecordStore:
    """Process-local store; contents are lost on restart."""

    def __init__(self, name: str = "records"):
        self.name = name
        self._records: Dict[str, Record] = {}
        self._lock = threading.Lock()

    def create(self, record: Record) -> Record:
        stamped = _stamp_new(record)
        with self._lock:
            self._records[stamped["id"]] = stamped
        return dict(stamped)

    def find_by_id(self, record_id: str) -> Optional[Record]:
        record = self._records.get(record_id)
        return dict(record) if record is not None else None

    def update(self, record_id: str, fields: Record) -> Optional[Record]:
        with self._lock:
            record = self._records.get(record_id)
            if record is None:
                return None
            record.update({k: v for k, v in fields.items() if k != "id"})
            record["updated_at"] = utc_now_iso()
            return dict(record)

    def list_all(self) -> List[Record]:
        return [dict(r) for r in _newest_first(list(self._records.values()))]


class JsonFileRecordStore:
    """One JSON file holding a list of records."""

    def __init__(self, file_path: Path):
        self.file_path = Path(file_path)
        self._lock = threading.Lock()

    def _load(self) -> List[Record]:
        if not self.file_path.exists():
            return []
        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreUnavailableError(f"Cannot read {self.file_path}: {e}") from e
        if not isinstance(data, list):
            raise StoreUnavailableError(f"{self.file_path} does not hold a record list")
        return data

    def _save(self, records: List[Record]) -> None:
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.file_path.with_suffix(self.file_path.suffix + ".tmp")
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2)
            tmp.replace(self.file_path)
        except OSError as e:
            raise StoreUnavailableError(f"Cannot write {self.file_path}: {e}") from e

    def create(self, record: Record) -> Record:
        stamped = _stamp_new(record)
        with self._lock:
            records = self._load()
            records.append(stamped)
            self._save(records)
        return stamped

    def find_by_id(self, record_id: str) -> Optional[Record]:
        for record in self._load():
            if record.get("id") == record_id:
                return record
        return None

    def update(self, record_id: str, fields: Record) -> Optional[Record]:
        with self._lock:
            records = self._load()
            for record in records:
                if record.get("id") == record_id:
                    record.update({k: v for k, v in fields.items() if k != "id"})
                    record["updated_at"] = utc_now_iso()
                    self._save(records)
                    return record
        return None

    def list_all(self) -> List[Record]:
        return _newest_first(self._load())


def create_record_store(collection: str, config: Optional[StorageConfig] = None) -> RecordStore:
    """Store for one collection ('profiles', 'notifications') per configuration."""
    config = config or get_config().storage
    if config.backend == "memory":
        return InMemoryRecordStore(collection)
    if config.backend == "json":
        path = resolve_backend_path(config.path) / f"{collection}.json"
        logger.info("Using JSON record store for %s at %s", collection, path)
        return JsonFileRecordStore(path)
    raise ValueError(f"Unknown storage backend: {config.backend!r}")
