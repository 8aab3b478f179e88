"""BibTeX export for database records."""

from __future__ import annotations

from typing import Any

import bibtexparser
from bibtexparser.bibdatabase import BibDatabase
from bibtexparser.bwriter import BibTexWriter

from citedb.models import DEFAULT_BIBTEX_TYPE

# (record field, BibTeX field)
FIELD_MAP = (
    ("title", "title"),
    ("year", "year"),
    ("venue", "journal"),
    ("doi", "doi"),
    ("arxiv", "eprint"),
    ("url", "url"),
    ("pages", "pages"),
    ("volume", "volume"),
    ("publisher", "publisher"),
)

DISPLAY_ORDER = ["author"] + [bib for _, bib in FIELD_MAP]


def record_to_bib_entry(entry: dict[str, Any]) -> dict[str, str]:
    """Map a database record onto a bibtexparser entry dict."""
    bib: dict[str, str] = {
        "ENTRYTYPE": entry.get("bibtex_type") or DEFAULT_BIBTEX_TYPE,
        "ID": str(entry["id"]),
        "author": " and ".join(entry.get("authors") or []),
    }
    for field, bib_field in FIELD_MAP:
        value = entry.get(field)
        if value not in (None, ""):
            bib[bib_field] = str(value)
    return bib


class BibWriter:
    """Render records as BibTeX text."""

    def __init__(self) -> None:
        self.writer = BibTexWriter()
        self.writer.indent = "  "
        self.writer.order_entries_by = None
        self.writer.display_order = DISPLAY_ORDER
        self.writer.comma_first = False

    def dumps(self, entries: list[dict[str, Any]]) -> str:
        db = BibDatabase()
        db.entries = [record_to_bib_entry(e) for e in entries]
        return bibtexparser.dumps(db, writer=self.writer)


def to_bibtex(entries: list[dict[str, Any]]) -> str:
    return BibWriter().dumps(entries)
