"""Kernel routing-table allocation for VRF devices."""

from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

from .errors import AllocationError

LOG = logging.getLogger(__name__)


class TableAllocator:
    """Assign a stable kernel table id to each VRF name.

    The allocator hashes the VRF name into ``[base, base + size)`` so ids
    stay out of the ranges used by the main/local tables and by unrelated
    software, and resolves collisions by linear probing.  Assignments are
    persisted to ``state_file`` as JSON so a restarted agent binds existing
    VRF devices to the same tables.

    Parameters
    ----------
    state_file:
        Where the mapping is stored.  ``None`` keeps the mapping in memory
        only.
    base:
        First table id handed out.
    size:
        Number of ids available from ``base`` on.
    """

    def __init__(
        self,
        state_file: Optional[Path] = None,
        base: int = 1000,
        size: int = 1000,
    ) -> None:
        if size <= 0:
            raise ValueError("allocator size must be positive")
        self._state_file = Path(state_file) if state_file else None
        self._base = base
        self._size = size
        self._registry: Dict[str, int] = {}
        self._reverse: Dict[int, str] = {}
        self._load()

    def _load(self) -> None:
        if self._state_file is None or not self._state_file.exists():
            return
        try:
            payload = json.loads(self._state_file.read_text())
        except (OSError, json.JSONDecodeError) as exc:
            raise AllocationError(f"cannot read table state {self._state_file}: {exc}") from exc
        tables = payload.get("tables", {}) if isinstance(payload, dict) else {}
        for name, table_id in tables.items():
            self._registry[str(name)] = int(table_id)
            self._reverse[int(table_id)] = str(name)
        LOG.debug("Loaded %d table allocations from %s", len(self._registry), self._state_file)

    def _save(self) -> None:
        if self._state_file is None:
            return
        self._state_file.parent.mkdir(parents=True, exist_ok=True)
        body = json.dumps({"tables": self._registry}, indent=2, sort_keys=True)
        fd, tmp = tempfile.mkstemp(dir=self._state_file.parent, prefix=".tables-")
        try:
            with os.fdopen(fd, "w") as fh:
                fh.write(body + "\n")
            os.replace(tmp, self._state_file)
        except OSError as exc:
            Path(tmp).unlink(missing_ok=True)
            raise AllocationError(f"cannot persist table state {self._state_file}: {exc}") from exc

    def _hash_name(self, name: str) -> int:
        digest = hashlib.sha256(name.encode("utf-8")).digest()
        return int.from_bytes(digest[:4], "big") % self._size

    def allocate(self, name: str) -> int:
        if name in self._registry:
            return self._registry[name]

        offset = self._hash_name(name)
        start = offset
        while self._base + offset in self._reverse:
            offset = (offset + 1) % self._size
            if offset == start:
                raise AllocationError("table allocator exhausted identifier space")

        table_id = self._base + offset
        self._registry[name] = table_id
        self._reverse[table_id] = name
        self._save()
        LOG.info("Allocated kernel table %d for VRF '%s'", table_id, name)
        return table_id

    def lookup(self, name: str) -> Optional[int]:
        return self._registry.get(name)

    def release(self, name: str) -> Optional[int]:
        table_id = self._registry.pop(name, None)
        if table_id is not None:
            self._reverse.pop(table_id, None)
            self._save()
        return table_id
