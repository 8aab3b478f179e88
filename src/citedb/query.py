"""Read-only queries over a loaded store."""

from __future__ import annotations

import re
from typing import Any

from citedb.errors import NotFoundError
from citedb.store import Store


def compile_term(term: str) -> re.Pattern[str]:
    """Compile a search term as a case-insensitive pattern.

    Terms that are not valid regular expressions are matched literally.
    """
    try:
        return re.compile(term, re.IGNORECASE)
    except re.error:
        return re.compile(re.escape(term), re.IGNORECASE)


class QueryEngine:
    """Lookup, search and tag filtering. Results keep store order."""

    def __init__(self, store: Store) -> None:
        self.store = store

    def lookup(self, record_id: str) -> dict[str, Any]:
        entry = self.store.find_by_id(record_id)
        if entry is None:
            raise NotFoundError(record_id)
        return entry

    def search(self, term: str) -> list[dict[str, Any]]:
        """Match ``term`` against title, each author and the abstract."""
        pattern = compile_term(term)

        def matches(entry: dict[str, Any]) -> bool:
            if pattern.search(str(entry.get("title") or "")):
                return True
            if any(pattern.search(str(a)) for a in entry.get("authors") or []):
                return True
            abstract = entry.get("abstract")
            return bool(abstract) and pattern.search(str(abstract)) is not None

        return [e for e in self.store.all() if matches(e)]

    def filter_by_tag(self, tag: str) -> list[dict[str, Any]]:
        """Entries whose ``tags`` contain ``tag`` exactly."""
        return [e for e in self.store.all() if isinstance(e.get("tags"), list) and tag in e["tags"]]


def summary_line(entry: dict[str, Any]) -> str:
    return f"{entry.get('id')}: {entry.get('title')} ({entry.get('year')})"
