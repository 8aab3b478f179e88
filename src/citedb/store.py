"""In-memory citation database backed by a JSON file."""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from citedb.errors import StoreFormatError, StoreIOError
from citedb.models import Record, canonical_entry

LOG = logging.getLogger(__name__)


def sort_key(entry: dict[str, Any]) -> str:
    return str(entry.get("id", ""))


def parse_entries(text: str, source: str = "<string>") -> list[dict[str, Any]]:
    """Parse database text into a list of objects.

    Raises:
        StoreFormatError: If the text is not a JSON array of objects
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise StoreFormatError(f"{source} is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise StoreFormatError(f"{source} must contain a JSON array, got {type(data).__name__}")
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise StoreFormatError(f"{source}: element {i} is not an object")
    return data


def dumps_entries(entries: Iterable[dict[str, Any]]) -> str:
    """Serialize entries deterministically: declared key order, 2-space indent, trailing newline."""
    return json.dumps([canonical_entry(e) for e in entries], indent=2, ensure_ascii=False) + "\n"


class Store:
    """The full ordered sequence of records for one invocation.

    Records are kept as plain dicts in the order they were loaded;
    ``insert`` re-sorts the whole sequence by id. The store performs no
    duplicate checking of its own.
    """

    def __init__(self, path: str | os.PathLike[str] | None = None, entries: list[dict[str, Any]] | None = None):
        self.path = Path(path) if path is not None else None
        self._entries: list[dict[str, Any]] = list(entries or [])

    @classmethod
    def load(cls, path: str | os.PathLike[str]) -> Store:
        """Load the database at ``path``.

        Raises:
            StoreIOError: If the file cannot be read
            StoreFormatError: If it is not a JSON array of objects
        """
        try:
            with open(path, encoding="utf-8") as f:
                text = f.read()
        except UnicodeDecodeError as e:
            raise StoreFormatError(f"{path} is not UTF-8 text: {e}") from e
        except OSError as e:
            raise StoreIOError(f"Could not read {path}: {e}") from e
        entries = parse_entries(text, source=str(path))
        LOG.debug("Loaded %d entries from %s", len(entries), path)
        return cls(path, entries)

    @classmethod
    def from_entries(cls, entries: Iterable[dict[str, Any]]) -> Store:
        return cls(None, list(entries))

    def __len__(self) -> int:
        return len(self._entries)

    def all(self) -> list[dict[str, Any]]:
        return list(self._entries)

    def ids(self) -> list[str]:
        return [sort_key(e) for e in self._entries]

    def find_by_id(self, record_id: str) -> dict[str, Any] | None:
        for entry in self._entries:
            if entry.get("id") == record_id:
                return entry
        return None

    def insert(self, record: Record | dict[str, Any]) -> None:
        """Append a record and re-sort the whole sequence by id."""
        entry = record.to_dict() if isinstance(record, Record) else canonical_entry(record)
        self._entries.append(entry)
        self._entries.sort(key=sort_key)

    def dumps(self) -> str:
        return dumps_entries(self._entries)

    def persist(self, path: str | os.PathLike[str] | None = None) -> None:
        """Rewrite the whole database file atomically.

        Raises:
            StoreIOError: If there is no target path or the write fails
        """
        target = Path(path) if path is not None else self.path
        if target is None:
            raise StoreIOError("No database path to persist to")
        text = self.dumps()
        try:
            tmp = tempfile.NamedTemporaryFile(
                "w",
                delete=False,
                encoding="utf-8",
                dir=target.parent,
                suffix=".json",
                prefix=".tmp_citations_",
            )
        except OSError as e:
            raise StoreIOError(f"Could not write {target}: {e}") from e
        try:
            try:
                tmp.write(text)
                tmp.flush()
                os.fsync(tmp.fileno())
            finally:
                tmp.close()
            os.replace(tmp.name, target)
        except OSError as e:
            with contextlib.suppress(OSError):
                os.unlink(tmp.name)
            raise StoreIOError(f"Could not write {target}: {e}") from e
        LOG.debug("Wrote %d entries to %s", len(self._entries), target)
