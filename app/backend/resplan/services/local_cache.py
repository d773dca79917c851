"""Single-slot JSON snapshot of the record collection on local disk."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from resplan.core.errors import CacheCorrupt
from resplan.models.records import ResourceAssignment

logger = logging.getLogger(__name__)

_RECORDS_ADAPTER = TypeAdapter(list[ResourceAssignment])


class LocalSnapshotCache:
    """Reads and writes one named slot holding a JSON array of records."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def read(self) -> list[ResourceAssignment]:
        """Return cached records; an absent slot is an empty list.

        Raises ``CacheCorrupt`` when the slot exists but does not decode.
        """

        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise CacheCorrupt(f"Cannot read snapshot {self.path}: {exc}") from exc

        if not raw.strip():
            return []
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CacheCorrupt(f"Snapshot {self.path} is not valid JSON.") from exc
        if not isinstance(payload, list):
            raise CacheCorrupt(f"Snapshot {self.path} must hold a JSON array.")
        try:
            return _RECORDS_ADAPTER.validate_python(payload)
        except ValidationError as exc:
            raise CacheCorrupt(f"Snapshot {self.path} holds invalid records.") from exc

    def write(self, records: Iterable[ResourceAssignment]) -> None:
        """Replace the slot atomically. ``OSError`` propagates to the caller."""

        payload = [record.to_wire() for record in records]
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote %d records to %s", len(payload), self.path)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
