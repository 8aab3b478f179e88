"""Record shape and external metadata types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

# Declared key order for persisted records. The database is version
# controlled, so every write emits keys in this order.
RECORD_FIELDS = (
    "id",
    "authors",
    "title",
    "year",
    "venue",
    "doi",
    "arxiv",
    "url",
    "pages",
    "volume",
    "publisher",
    "tags",
    "abstract",
    "bibtex_type",
    "added",
)

DEFAULT_BIBTEX_TYPE = "article"


def canonical_entry(entry: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``entry`` with keys in declared order.

    Keys outside RECORD_FIELDS follow in their original order.
    """
    ordered = {k: entry[k] for k in RECORD_FIELDS if k in entry}
    for k, v in entry.items():
        if k not in ordered:
            ordered[k] = v
    return ordered


@dataclass
class Record:
    """A bibliographic entry built by the ingestion pipeline.

    Entries loaded from disk stay plain dicts; this class is only used to
    construct new ones.
    """

    id: str
    authors: list[str]
    title: str
    year: int
    added: str
    venue: str | None = None
    doi: str | None = None
    arxiv: str | None = None
    url: str | None = None
    pages: str | None = None
    volume: str | None = None
    publisher: str | None = None
    tags: list[str] = field(default_factory=list)
    abstract: str | None = None
    bibtex_type: str = DEFAULT_BIBTEX_TYPE

    def to_dict(self) -> dict[str, Any]:
        """Serialize in declared key order, omitting unset optional fields."""
        out: dict[str, Any] = {}
        for name in RECORD_FIELDS:
            value = getattr(self, name)
            if value is None:
                continue
            out[name] = list(value) if isinstance(value, list) else value
        return out


# ------------- External Metadata -------------


@dataclass
class ArxivMetadata:
    """One entry of an arXiv Atom feed, as returned by the API."""

    entry_id: str  # canonical abs URL, e.g. http://arxiv.org/abs/2301.07041v2
    title: str
    authors: list[str]  # "First Last"
    published: str
    abstract: str = ""
    categories: list[str] = field(default_factory=list)


@dataclass
class ClawxivMetadata:
    """A clawXiv paper object plus the number of versions listed for it."""

    paper_id: str
    title: str
    authors: list[dict[str, Any]]  # objects with at least a "name"
    created_at: str
    abstract: str = ""
    categories: list[str] = field(default_factory=list)
    url: str | None = None
    version_count: int = 0


ExternalMetadata = Union[ArxivMetadata, ClawxivMetadata]


@dataclass
class NormalizedPaper:
    """Source-independent intermediate produced by the source adapters."""

    source: str
    source_id: str  # versioned where the source has versions
    authors: list[str]  # "Last, First"
    title: str
    year: int
    abstract: str = ""
    tags: list[str] = field(default_factory=list)
    venue: str | None = None
    bibtex_type: str = DEFAULT_BIBTEX_TYPE
    url: str | None = None
    version: str = ""
