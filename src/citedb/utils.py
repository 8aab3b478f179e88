"""Shared helpers for the citation database tools.

Includes text normalization, author name formatting, identifier
handling for arXiv and clawXiv, citation key generation, and the HTTP
client used by the metadata sources.
"""

from __future__ import annotations

import re
from typing import Any

import httpx

from citedb.errors import ParseError

# ------------- Constants & Regex -------------

ARXIV_API = "https://export.arxiv.org/api/query"
CLAWXIV_API = "https://www.clawxiv.org/api/v1"
CLAWXIV_PREFIX = "clawxiv."

ARXIV_VERSION_RE = re.compile(r"v(\d+)$")
# Canonical abs URL ending in a version suffix, e.g. http://arxiv.org/abs/2301.07041v2
ARXIV_ABS_VERSION_RE = re.compile(r"arxiv\.org/abs/\d+\.\d+(v\d+)$", re.IGNORECASE)
ARXIV_BASE_ID_RE = re.compile(r"(\d{4}\.\d{4,5})")

_WS_RE = re.compile(r"\s+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")
_YEAR_RE = re.compile(r"[0-9]{4}")


# ------------- Text Normalization -------------


def collapse_whitespace(text: str | None) -> str:
    """Trim and collapse every whitespace run (newlines included) to one space."""
    return _WS_RE.sub(" ", (text or "").strip())


def slug(text: str) -> str:
    """Lowercase and drop everything except ASCII letters and digits."""
    return _NON_ALNUM_RE.sub("", text.lower())


def parse_year(timestamp: str | None) -> int:
    """Parse the year from the first four characters of an ISO-8601-like string."""
    head = (timestamp or "")[:4]
    if not _YEAR_RE.fullmatch(head):
        raise ParseError(f"Could not parse year from {timestamp!r}")
    return int(head)


# ------------- Author Handling -------------


def format_author_name(name: str) -> str:
    """Convert 'First Middle Last' to 'Last, First Middle'.

    Names that already contain a comma pass through unchanged, as do
    single-token names.
    """
    if "," in name:
        return name
    parts = name.split()
    if len(parts) <= 1:
        return name.strip()
    return f"{parts[-1]}, {' '.join(parts[:-1])}"


def last_name(formatted: str) -> str:
    """Family name part of a 'Last, First' author string."""
    return formatted.split(",", 1)[0]


def generate_id(authors: list[str], year: int, title: str) -> str:
    """Build a citation key: first author's last name + year + first title word.

    Deterministic but not collision-free; callers check for duplicates.
    """
    first_word = title.split()[0] if title.split() else ""
    return f"{slug(last_name(authors[0]))}{year}{slug(first_word)}"


# ------------- arXiv & clawXiv Identifiers -------------


def strip_arxiv_version(arxiv_id: str) -> str:
    """Remove a trailing 'vN' version suffix."""
    return ARXIV_VERSION_RE.sub("", arxiv_id.strip())


def clawxiv_full_id(paper_id: str) -> str:
    """Ensure a clawXiv identifier carries the 'clawxiv.' prefix."""
    paper_id = paper_id.strip()
    return paper_id if paper_id.startswith(CLAWXIV_PREFIX) else f"{CLAWXIV_PREFIX}{paper_id}"


# ------------- HTTP Client -------------


class HttpClient:
    """Thin httpx wrapper used by the metadata sources.

    Requests are made once; there is no retry or caching layer. Failures
    surface to the caller as ``httpx.HTTPError``.
    """

    def __init__(self, timeout: float, user_agent: str) -> None:
        """Initialize HTTP client.

        Args:
            timeout: Request timeout in seconds
            user_agent: User-Agent header value
        """
        self.client = httpx.Client(
            timeout=httpx.Timeout(timeout),
            headers={"User-Agent": user_agent},
            follow_redirects=True,
        )

    def get(self, url: str, params: dict[str, Any] | None = None, accept: str | None = None) -> httpx.Response:
        headers = {"Accept": accept} if accept else {}
        return self.client.get(url, params=params, headers=headers)

    def close(self) -> None:
        self.client.close()
