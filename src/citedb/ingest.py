"""Add a paper from an external source to the database.

The pipeline is linear: fetch, normalize, generate an id, check for
duplicates, build the record, insert, persist. Nothing is written until
every earlier step has succeeded, and persisting is the only side effect.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

from citedb.errors import DuplicateIdError
from citedb.models import ExternalMetadata, NormalizedPaper, Record
from citedb.normalizer import build_record, normalize, paper_id
from citedb.store import Store
from citedb.utils import strip_arxiv_version

LOG = logging.getLogger(__name__)


class MetadataSource(Protocol):
    name: str

    def fetch(self, identifier: str) -> ExternalMetadata: ...


@dataclass
class IngestResult:
    """Outcome of one successful ingestion."""

    record: Record
    paper: NormalizedPaper
    warnings: list[str] = field(default_factory=list)
    persisted: bool = False


def today_iso() -> str:
    return datetime.date.today().isoformat()


def related_entries(store: Store, paper: NormalizedPaper) -> list[dict[str, Any]]:
    """Existing entries that look like another version of ``paper``.

    arXiv entries match on the un-versioned arXiv id; clawXiv entries
    match on the paper id appearing in the stored URL.
    """
    if paper.source == "arxiv":
        base = strip_arxiv_version(paper.source_id)
        return [e for e in store.all() if str(e.get("arxiv") or "").startswith(base)]
    return [e for e in store.all() if paper.source_id in str(e.get("url") or "")]


class IngestionPipeline:
    """Fetch one paper from ``source`` and commit it to ``store``.

    Args:
        store: Loaded database; persisted in place on success
        source: Metadata source (see ``citedb.sources``)
        today: Callable returning the ISO date recorded in ``added``
        dry_run: Run every step except persisting
    """

    def __init__(
        self,
        store: Store,
        source: MetadataSource,
        today: Callable[[], str] = today_iso,
        dry_run: bool = False,
    ) -> None:
        self.store = store
        self.source = source
        self.today = today
        self.dry_run = dry_run

    def run(self, identifier: str) -> IngestResult:
        LOG.info("Fetching %s:%s...", self.source.name, identifier)
        meta = self.source.fetch(identifier)

        paper = normalize(meta)
        LOG.info("Found: %s", paper.title)
        LOG.info("Authors: %s", "; ".join(paper.authors))
        LOG.info("Year: %d", paper.year)
        if paper.version:
            LOG.info("Version: %s", paper.version)

        record_id = paper_id(paper)
        LOG.info("Generated ID: %s", record_id)

        if self.store.find_by_id(record_id) is not None:
            raise DuplicateIdError([record_id], f"Entry with ID '{record_id}' already exists")

        warnings = []
        for entry in related_entries(self.store, paper):
            msg = f"Entry '{entry.get('id')}' may already cover {paper.source}:{paper.source_id}"
            LOG.warning(msg)
            warnings.append(msg)

        record = build_record(paper, record_id, self.today())
        self.store.insert(record)

        result = IngestResult(record=record, paper=paper, warnings=warnings)
        if self.dry_run:
            LOG.info("[DRY RUN] Would add entry: %s", record_id)
            return result
        self.store.persist()
        result.persisted = True
        LOG.info("Added entry: %s", record_id)
        return result
