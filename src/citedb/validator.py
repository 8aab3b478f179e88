"""Database validation: JSON shape, schema conformance, unique ids, ordering.

All four checks run and report independently so that a single pass shows
everything that is wrong. The later checks are skipped only when the
database cannot be parsed at all.
"""

from __future__ import annotations

import json
import logging
import os
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from jsonschema import Draft7Validator, FormatChecker
from jsonschema.exceptions import SchemaError

from citedb.errors import (
    DuplicateIdError,
    OrderingViolation,
    SchemaFormatError,
    SchemaViolation,
    StoreFormatError,
)
from citedb.store import Store

LOG = logging.getLogger(__name__)

CHECK_FORMAT = "format"
CHECK_SCHEMA = "schema"
CHECK_DUPLICATES = "duplicates"
CHECK_ORDER = "order"


@dataclass
class CheckResult:
    """Outcome of one validation check."""

    name: str
    passed: bool
    skipped: bool = False
    messages: list[str] = field(default_factory=list)


@dataclass
class ValidationReport:
    """Structured summary of a validation run.

    Attributes:
        entry_count: Number of records in the database (0 if unparseable)
        checks: One CheckResult per check, in execution order
        violations: Schema violations as (location, message) pairs
        duplicates: Every id that occurs more than once
        first_out_of_order: First id not in its sorted position
        expected_order: Fully sorted id list, set when ordering fails
        format_error: Parse failure message, if any
    """

    entry_count: int = 0
    checks: list[CheckResult] = field(default_factory=list)
    violations: list[tuple[str, str]] = field(default_factory=list)
    duplicates: list[str] = field(default_factory=list)
    first_out_of_order: str | None = None
    expected_order: list[str] = field(default_factory=list)
    format_error: str | None = None

    @property
    def ok(self) -> bool:
        return all(c.passed for c in self.checks)

    def check(self, name: str) -> CheckResult | None:
        for c in self.checks:
            if c.name == name:
                return c
        return None

    def raise_for_status(self) -> None:
        """Raise the error for the first failing check, if any."""
        if self.format_error is not None:
            raise StoreFormatError(self.format_error)
        if self.violations:
            raise SchemaViolation(self.violations)
        if self.duplicates:
            raise DuplicateIdError(self.duplicates)
        if self.first_out_of_order is not None:
            raise OrderingViolation(self.first_out_of_order, self.expected_order)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "entries": self.entry_count,
            "checks": {c.name: "skipped" if c.skipped else ("pass" if c.passed else "fail") for c in self.checks},
            "violations": [{"location": loc, "message": msg} for loc, msg in self.violations],
            "duplicates": self.duplicates,
            "first_out_of_order": self.first_out_of_order,
        }


# ------------- Schema Loading -------------


def load_schema(path: str | os.PathLike[str]) -> dict[str, Any]:
    """Load and check a JSON Schema document.

    Raises:
        SchemaFormatError: If the file is unreadable, not JSON, or not a valid schema
    """
    try:
        with open(path, encoding="utf-8") as f:
            schema = json.load(f)
    except OSError as e:
        raise SchemaFormatError(f"Could not read schema {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise SchemaFormatError(f"Schema {path} is not valid JSON: {e}") from e
    try:
        Draft7Validator.check_schema(schema)
    except SchemaError as e:
        raise SchemaFormatError(f"Schema {path} is not a valid JSON Schema: {e.message}") from e
    return schema


def _location(error: Any) -> str:
    parts = [str(p) for p in error.absolute_path]
    return "/" + "/".join(parts) if parts else "(root)"


# ------------- Individual Checks -------------


def schema_violations(entries: list[dict[str, Any]], schema: dict[str, Any]) -> list[tuple[str, str]]:
    """Every schema error for the whole database."""
    validator = Draft7Validator(schema, format_checker=FormatChecker())
    return [(_location(e), e.message) for e in validator.iter_errors(entries)]


def find_duplicates(ids: list[str]) -> list[str]:
    """Ids occurring more than once, each reported once, in first-seen order."""
    counts = Counter(ids)
    seen: list[str] = []
    for i in ids:
        if counts[i] > 1 and i not in seen:
            seen.append(i)
    return seen


def first_out_of_order(ids: list[str]) -> tuple[str | None, list[str]]:
    """Compare ids with their sorted order.

    Returns:
        (first id not in its sorted position or None, sorted ids)
    """
    expected = sorted(ids)
    for actual, want in zip(ids, expected):
        if actual != want:
            return actual, expected
    return None, expected


# ------------- Validator -------------


class Validator:
    """Runs every check against a database file or a loaded store."""

    def __init__(self, schema: dict[str, Any]) -> None:
        self.schema = schema

    @classmethod
    def from_path(cls, schema_path: str | os.PathLike[str]) -> Validator:
        return cls(load_schema(schema_path))

    def validate_path(self, path: str | os.PathLike[str]) -> ValidationReport:
        """Validate a database file. Only I/O failures raise; format problems are reported."""
        try:
            store = Store.load(path)
        except StoreFormatError as e:
            LOG.debug("Database failed to parse: %s", e)
            report = ValidationReport(format_error=str(e))
            report.checks.append(CheckResult(CHECK_FORMAT, passed=False, messages=[str(e)]))
            for name in (CHECK_SCHEMA, CHECK_DUPLICATES, CHECK_ORDER):
                report.checks.append(CheckResult(name, passed=False, skipped=True))
            return report
        return self.validate(store)

    def validate(self, store: Store) -> ValidationReport:
        entries = store.all()
        # Entries without a string id are already schema violations.
        ids = [e["id"] for e in entries if isinstance(e.get("id"), str)]
        report = ValidationReport(entry_count=len(entries))
        report.checks.append(CheckResult(CHECK_FORMAT, passed=True))

        report.violations = schema_violations(entries, self.schema)
        report.checks.append(
            CheckResult(
                CHECK_SCHEMA,
                passed=not report.violations,
                messages=[f"{loc}: {msg}" for loc, msg in report.violations],
            )
        )

        report.duplicates = find_duplicates(ids)
        report.checks.append(
            CheckResult(
                CHECK_DUPLICATES,
                passed=not report.duplicates,
                messages=[f"Duplicate IDs found: {', '.join(report.duplicates)}"] if report.duplicates else [],
            )
        )

        offender, expected = first_out_of_order(ids)
        order = CheckResult(CHECK_ORDER, passed=offender is None)
        if offender is not None:
            report.first_out_of_order = offender
            report.expected_order = expected
            order.messages = [f"First out-of-order: {offender}", f"Expected order: {', '.join(expected)}"]
        report.checks.append(order)

        LOG.debug("Validation finished: %s", report.to_dict()["checks"])
        return report
