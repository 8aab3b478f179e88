"""Metadata sources: the arXiv API and the clawXiv API.

Each source fetches exactly once per call. Network errors and non-success
responses become ``FetchError``; the only exception is the clawXiv
versions listing, which reports ``0`` on any failure because version
information is optional.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from citedb.errors import FetchError
from citedb.models import ArxivMetadata, ClawxivMetadata
from citedb.normalizer import parse_arxiv_atom
from citedb.utils import ARXIV_API, CLAWXIV_API, HttpClient, clawxiv_full_id, strip_arxiv_version

LOG = logging.getLogger(__name__)


class ArxivSource:
    name = "arxiv"

    def __init__(self, http: HttpClient, api_url: str = ARXIV_API) -> None:
        self.http = http
        self.api_url = api_url

    def fetch(self, identifier: str) -> ArxivMetadata:
        """Fetch the Atom entry for an arXiv id. Any version suffix is dropped for the query."""
        base_id = strip_arxiv_version(identifier)
        try:
            resp = self.http.get(self.api_url, params={"id_list": base_id}, accept="application/atom+xml")
        except httpx.HTTPError as e:
            raise FetchError(f"arXiv:{identifier}", e) from e
        if resp.status_code != 200:
            raise FetchError(f"arXiv:{identifier}", f"HTTP {resp.status_code}: {resp.text}")
        return parse_arxiv_atom(resp.text)


class ClawxivSource:
    name = "clawxiv"

    def __init__(self, http: HttpClient, api_url: str = CLAWXIV_API) -> None:
        self.http = http
        self.api_url = api_url.rstrip("/")

    def fetch(self, identifier: str) -> ClawxivMetadata:
        """Fetch a paper and the number of versions listed for it."""
        paper_id = clawxiv_full_id(identifier)
        try:
            resp = self.http.get(f"{self.api_url}/papers/{paper_id}", accept="application/json")
        except httpx.HTTPError as e:
            raise FetchError(paper_id, e) from e
        if resp.status_code != 200:
            raise FetchError(paper_id, f"HTTP {resp.status_code}: {resp.text}")
        try:
            data: dict[str, Any] = resp.json()
        except ValueError as e:
            raise FetchError(paper_id, f"invalid JSON response: {e}") from e
        if not isinstance(data, dict):
            raise FetchError(paper_id, "unexpected response shape")

        return ClawxivMetadata(
            paper_id=paper_id,
            title=data.get("title") or "",
            authors=list(data.get("authors") or []),
            created_at=str(data.get("created_at") or ""),
            abstract=data.get("abstract") or "",
            categories=list(data.get("categories") or []),
            url=data.get("url"),
            version_count=self.fetch_version_count(paper_id),
        )

    def fetch_version_count(self, identifier: str) -> int:
        """Number of listed versions, or 0 when the listing is unavailable."""
        paper_id = clawxiv_full_id(identifier)
        try:
            resp = self.http.get(f"{self.api_url}/papers/{paper_id}/versions", accept="application/json")
            if resp.status_code != 200:
                return 0
            versions = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            LOG.debug("Version lookup failed for %s: %s", paper_id, e)
            return 0
        return len(versions) if isinstance(versions, list) else 0
