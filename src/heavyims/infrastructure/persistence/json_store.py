"""Single-document JSON store.

Every aggregate lives in one file::

    {"inventory": [...], "work_orders": [...], "technicians": [...]}

A commit rewrites the whole document to a temporary file in the same
directory and swaps it in with ``os.replace``, so readers see either the old
document or the new one, never a mix.  Writers in one process are serialised
by a per-file lock; each row's ``version`` catches writers in other processes.
"""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable

from heavyims.domain.exceptions import PersistenceError

# Section name -> identity field of its rows.
SECTIONS: dict[str, str] = {
    "inventory": "inventory_id",
    "work_orders": "work_order_id",
    "technicians": "technician_id",
}


def empty_document() -> dict[str, list[dict]]:
    return {name: [] for name in SECTIONS}


class JsonDocumentStore:

    _locks: dict[str, threading.Lock] = {}
    _locks_guard = threading.Lock()

    def __init__(self, file_path: Path) -> None:
        self._file_path = Path(file_path)

    @property
    def file_path(self) -> Path:
        return self._file_path

    @property
    def lock(self) -> threading.Lock:
        key = str(self._file_path.resolve())
        with self._locks_guard:
            return self._locks.setdefault(key, threading.Lock())

    def read(self) -> dict[str, list[dict]]:
        if not self._file_path.exists():
            return empty_document()
        try:
            document = json.loads(self._file_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Data file {self._file_path} is not valid JSON: {exc}") from exc
        if not isinstance(document, dict):
            raise PersistenceError(f"Data file {self._file_path} does not hold a JSON object")
        for name in SECTIONS:
            document.setdefault(name, [])
        return document

    def write(self, document: dict[str, list[dict]]) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._file_path.name}.", suffix=".tmp", dir=self._file_path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(document, fh, indent=2)
                fh.write("\n")
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self._file_path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_name)
            raise


class JsonSession:
    """The rows read when a unit of work began, and the aggregates built from them.

    Keeps an identity map so the same row always yields the same object
    within one unit of work, and remembers each row as loaded so the unit of
    work can tell which aggregates actually changed.
    """

    def __init__(self, document: dict[str, list[dict]]) -> None:
        self._document = document
        self.identity: dict[tuple[str, str], Any] = {}
        self.originals: dict[tuple[str, str], dict] = {}

    def all(self, section: str, to_domain: Callable[[dict], Any]) -> list[Any]:
        """Every aggregate in a section: stored rows first, then ones added since."""
        id_field = SECTIONS[section]
        result = []
        stored_keys = set()
        for raw in self._document[section]:
            key = (section, raw[id_field])
            stored_keys.add(key)
            if key not in self.identity:
                self.identity[key] = to_domain(raw)
                self.originals[key] = raw
            result.append(self.identity[key])
        for key, aggregate in self.identity.items():
            if key[0] == section and key not in stored_keys:
                result.append(aggregate)
        return result

    def add(self, section: str, aggregate_id: str, aggregate: Any) -> None:
        self.identity[(section, aggregate_id)] = aggregate
