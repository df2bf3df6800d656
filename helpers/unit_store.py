"""
Storage for imported unit records.

The query engine only needs ``read()``; imports go through ``append()``.
Imports are append-only: the same file imported twice is stored twice unless a
``dedup`` hook is supplied.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder

from .errors import StorageUnavailable
from .records import Record

logger = logging.getLogger(__name__)

DedupHook = Callable[[Sequence[Record], Sequence[Record]], List[Record]]

# Stores are built per request, so appends in this process share one lock.
_APPEND_LOCK = threading.Lock()


def stamp_record(record: Record) -> Record:
    """Copy a record, adding ``id`` and ``createdAt`` when it has none."""
    stamped = dict(record)
    if not stamped.get("id"):
        stamped["id"] = uuid.uuid4().hex
    if not stamped.get("createdAt"):
        stamped["createdAt"] = datetime.now(timezone.utc).isoformat()
    return stamped


def dedup_by(*keys: str) -> DedupHook:
    """
    Dedup hook that drops incoming records whose values for ``keys`` are
    already stored (or repeated earlier in the same import).
    """

    def _identity(record: Record) -> tuple:
        return tuple(str(record.get(key, "")) for key in keys)

    def _dedup(existing: Sequence[Record], incoming: Sequence[Record]) -> List[Record]:
        seen = {_identity(record) for record in existing}
        kept: List[Record] = []
        for record in incoming:
            identity = _identity(record)
            if identity in seen:
                continue
            seen.add(identity)
            kept.append(record)
        return kept

    return _dedup


class UnitStore(ABC):
    def __init__(self, dedup: Optional[DedupHook] = None) -> None:
        self.dedup = dedup

    @abstractmethod
    def read(self) -> List[Record]:
        ...

    @abstractmethod
    def _write(self, records: List[Record]) -> None:
        ...

    def append(self, records: Sequence[Record]) -> List[Record]:
        """
        Stamp and append records, returning the ones actually stored.
        """
        incoming = [stamp_record(record) for record in records]
        with _APPEND_LOCK:
            existing = self.read()
            if self.dedup is not None:
                incoming = self.dedup(existing, incoming)
            self._write(existing + incoming)
        logger.info("Stored %s new units (%s total)", len(incoming), len(existing) + len(incoming))
        return incoming


class InMemoryUnitStore(UnitStore):
    def __init__(self, records: Sequence[Record] | None = None, dedup: Optional[DedupHook] = None) -> None:
        super().__init__(dedup=dedup)
        self._records: List[Record] = list(records or [])

    def read(self) -> List[Record]:
        return list(self._records)

    def _write(self, records: List[Record]) -> None:
        self._records = list(records)


class JsonUnitStore(UnitStore):
    """
    Records kept as one JSON array on disk.

    A missing file reads as an empty collection; a file that cannot be read
    or is not a JSON array raises ``StorageUnavailable``.
    """

    def __init__(self, path: Path | str, dedup: Optional[DedupHook] = None) -> None:
        super().__init__(dedup=dedup)
        self.path = Path(path)

    def read(self) -> List[Record]:
        if not self.path.exists():
            return []
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                records = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageUnavailable(f"Could not read {self.path}: {exc}") from exc

        if not isinstance(records, list):
            raise StorageUnavailable(f"{self.path} does not contain a list of records")
        return records

    def _write(self, records: List[Record]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(prefix=".units-", suffix=".json", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(records, handle, indent=2, cls=DjangoJSONEncoder)
            os.replace(temp_name, self.path)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise


def get_unit_store() -> UnitStore:
    """Build the store configured by ``settings.UNITS_DATA_FILE`` and ``UNITS_DEDUP_KEYS``."""
    default_path = Path(settings.BASE_DIR) / "data" / "properties.json"
    dedup_keys = tuple(getattr(settings, "UNITS_DEDUP_KEYS", ()))
    return JsonUnitStore(
        getattr(settings, "UNITS_DATA_FILE", default_path),
        dedup=dedup_by(*dedup_keys) if dedup_keys else None,
    )
