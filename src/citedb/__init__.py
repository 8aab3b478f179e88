"""citedb - a verified, version-controlled citation database.

This package provides tools for:
- Looking up, searching and tag-filtering citation records
- Exporting records as BibTeX
- Validating the database against its JSON Schema, unique ids and ordering
- Adding papers from arXiv and clawXiv with normalized author names

Example usage:
    from citedb import QueryEngine, Store, Validator

    store = Store.load("citations.json")
    entry = QueryEngine(store).lookup("vaswani2017attention")

    report = Validator.from_path("schema.json").validate(store)
    report.raise_for_status()
"""

from citedb._version import __version__
from citedb.bibtex import BibWriter, to_bibtex
from citedb.config import CitedbConfig, resolve_config
from citedb.errors import (
    CitedbError,
    DuplicateIdError,
    FetchError,
    FormatError,
    NormalizeError,
    NotFoundError,
    OrderingViolation,
    ParseError,
    SchemaFormatError,
    SchemaViolation,
    StoreFormatError,
    StoreIOError,
)
from citedb.ingest import IngestionPipeline, IngestResult
from citedb.models import (
    RECORD_FIELDS,
    ArxivMetadata,
    ClawxivMetadata,
    NormalizedPaper,
    Record,
    canonical_entry,
)
from citedb.normalizer import build_record, normalize, parse_arxiv_atom
from citedb.query import QueryEngine
from citedb.sources import ArxivSource, ClawxivSource
from citedb.store import Store
from citedb.utils import HttpClient, collapse_whitespace, format_author_name, generate_id, parse_year
from citedb.validator import CheckResult, ValidationReport, Validator

__all__ = [
    "__version__",
    # Core classes
    "IngestionPipeline",
    "IngestResult",
    "QueryEngine",
    "Store",
    "Validator",
    "ValidationReport",
    "CheckResult",
    "BibWriter",
    "CitedbConfig",
    "HttpClient",
    "ArxivSource",
    "ClawxivSource",
    # Models
    "RECORD_FIELDS",
    "ArxivMetadata",
    "ClawxivMetadata",
    "NormalizedPaper",
    "Record",
    "canonical_entry",
    # Functions
    "build_record",
    "collapse_whitespace",
    "format_author_name",
    "generate_id",
    "normalize",
    "parse_arxiv_atom",
    "parse_year",
    "resolve_config",
    "to_bibtex",
    # Errors
    "CitedbError",
    "DuplicateIdError",
    "FetchError",
    "FormatError",
    "NormalizeError",
    "NotFoundError",
    "OrderingViolation",
    "ParseError",
    "SchemaFormatError",
    "SchemaViolation",
    "StoreFormatError",
    "StoreIOError",
]
