"""Convert external metadata payloads into the canonical record shape.

Each source has an adapter producing a ``NormalizedPaper``; the shared
``build_record`` step turns that into a ``Record`` once an id has been
generated and checked by the ingestion pipeline.
"""

from __future__ import annotations

import logging
import re

from citedb.errors import NormalizeError
from citedb.models import (
    ArxivMetadata,
    ClawxivMetadata,
    ExternalMetadata,
    NormalizedPaper,
    Record,
)
from citedb.utils import (
    ARXIV_ABS_VERSION_RE,
    ARXIV_BASE_ID_RE,
    collapse_whitespace,
    format_author_name,
    generate_id,
    parse_year,
)

LOG = logging.getLogger(__name__)

ARXIV_VENUE = "arXiv preprint"
ARXIV_BIBTEX_TYPE = "preprint"
CLAWXIV_VENUE = "clawXiv"
CLAWXIV_BIBTEX_TYPE = "misc"

# ------------- Atom Feed Parsing -------------

_ENTRY_RE = re.compile(r"<entry[^>]*>(.*?)</entry>", re.DOTALL)
_ID_RE = re.compile(r"<id>([^<]+)</id>")
_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.DOTALL)
_AUTHOR_RE = re.compile(r"<author[^>]*>.*?<name>([^<]+)</name>.*?</author>", re.DOTALL)
_PUBLISHED_RE = re.compile(r"<published>([^<]*)</published>")
_SUMMARY_RE = re.compile(r"<summary[^>]*>(.*?)</summary>", re.DOTALL)
_CATEGORY_RE = re.compile(r"<category[^>]*term=\"([^\"]+)\"")


def parse_arxiv_atom(xml: str) -> ArxivMetadata:
    """Extract the first entry of an arXiv API Atom response.

    Raises:
        NormalizeError: If the feed has no entry, or the entry lacks an id or title
    """
    m = _ENTRY_RE.search(xml or "")
    if not m:
        raise NormalizeError("No entry found in arXiv response")
    entry = m.group(1)

    id_match = _ID_RE.search(entry)
    if not id_match:
        raise NormalizeError("Could not parse arXiv ID")
    title_match = _TITLE_RE.search(entry)
    if not title_match:
        raise NormalizeError("Could not parse title")
    published = _PUBLISHED_RE.search(entry)
    summary = _SUMMARY_RE.search(entry)

    return ArxivMetadata(
        entry_id=id_match.group(1).strip(),
        title=title_match.group(1),
        authors=[a.strip() for a in _AUTHOR_RE.findall(entry)],
        published=published.group(1).strip() if published else "",
        abstract=summary.group(1) if summary else "",
        categories=_CATEGORY_RE.findall(entry),
    )


# ------------- Source Adapters -------------


def _unique(items: list[str]) -> list[str]:
    seen: dict[str, None] = {}
    for item in items:
        if item:
            seen.setdefault(item, None)
    return list(seen)


def _require_title(title: str | None) -> str:
    title = collapse_whitespace(title)
    if not title:
        raise NormalizeError("Title is empty")
    return title


def _require_authors(names: list[str]) -> list[str]:
    authors = [format_author_name(collapse_whitespace(n)) for n in names if n and n.strip()]
    if not authors:
        raise NormalizeError("No authors present")
    return authors


def normalize_arxiv(meta: ArxivMetadata) -> NormalizedPaper:
    """Normalize an arXiv entry. The version comes from the canonical abs URL."""
    version_match = ARXIV_ABS_VERSION_RE.search(meta.entry_id)
    version = version_match.group(1) if version_match else "v1"
    base_match = ARXIV_BASE_ID_RE.search(meta.entry_id)
    if not base_match:
        raise NormalizeError(f"Could not parse arXiv ID format from {meta.entry_id!r}")

    return NormalizedPaper(
        source="arxiv",
        source_id=base_match.group(1) + version,
        authors=_require_authors(meta.authors),
        title=_require_title(meta.title),
        year=parse_year(meta.published),
        abstract=collapse_whitespace(meta.abstract),
        tags=_unique(meta.categories),
        venue=ARXIV_VENUE,
        bibtex_type=ARXIV_BIBTEX_TYPE,
        version=version,
    )


def normalize_clawxiv(meta: ClawxivMetadata) -> NormalizedPaper:
    """Normalize a clawXiv paper.

    clawXiv ids carry no version; when the versions listing reports more
    than one version, ``version`` is set to ``vN`` for display only.
    """
    if not meta.paper_id:
        raise NormalizeError("clawXiv paper ID missing")
    names = [str(a.get("name") or "") for a in meta.authors if isinstance(a, dict)]
    if meta.version_count > 1:
        LOG.debug("%s has %d versions (using latest)", meta.paper_id, meta.version_count)

    return NormalizedPaper(
        source="clawxiv",
        source_id=meta.paper_id,
        authors=_require_authors(names),
        title=_require_title(meta.title),
        year=parse_year(meta.created_at),
        abstract=collapse_whitespace(meta.abstract),
        tags=_unique(list(meta.categories or [])),
        venue=CLAWXIV_VENUE,
        bibtex_type=CLAWXIV_BIBTEX_TYPE,
        url=meta.url,
        version=f"v{meta.version_count}" if meta.version_count > 1 else "",
    )


def normalize(meta: ExternalMetadata) -> NormalizedPaper:
    """Dispatch to the adapter for the metadata's source."""
    if isinstance(meta, ArxivMetadata):
        return normalize_arxiv(meta)
    if isinstance(meta, ClawxivMetadata):
        return normalize_clawxiv(meta)
    raise NormalizeError(f"Unsupported metadata type: {type(meta).__name__}")


def paper_id(paper: NormalizedPaper) -> str:
    """Citation key for a normalized paper."""
    return generate_id(paper.authors, paper.year, paper.title)


def build_record(paper: NormalizedPaper, record_id: str, added: str) -> Record:
    """Assemble the final record for a normalized paper."""
    return Record(
        id=record_id,
        authors=list(paper.authors),
        title=paper.title,
        year=paper.year,
        venue=paper.venue,
        arxiv=paper.source_id if paper.source == "arxiv" else None,
        url=paper.url,
        tags=list(paper.tags),
        abstract=paper.abstract or None,
        bibtex_type=paper.bibtex_type,
        added=added,
    )
