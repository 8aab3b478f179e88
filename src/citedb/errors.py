"""Error types raised by the citation database tools.

Every error is terminal for the current invocation. The CLI catches
``CitedbError``, logs the message and exits with status 1.
"""

from __future__ import annotations


class CitedbError(Exception):
    """Base class for all citation database errors."""


class StoreIOError(CitedbError):
    """The database file could not be read or written."""


class FormatError(CitedbError):
    """A persisted JSON document is malformed."""


class StoreFormatError(FormatError):
    """The database is not a well-formed JSON array of objects."""


class SchemaFormatError(FormatError):
    """The schema document is not valid JSON or not a valid JSON Schema."""


class SchemaViolation(CitedbError):
    """One or more records do not conform to the schema.

    Attributes:
        violations: Every ``(location, message)`` pair found
    """

    def __init__(self, violations: list[tuple[str, str]]) -> None:
        self.violations = violations
        super().__init__(f"{len(violations)} schema violation(s)")


class DuplicateIdError(CitedbError):
    """One or more ids occur more than once."""

    def __init__(self, ids: list[str], message: str | None = None) -> None:
        self.ids = ids
        super().__init__(message or f"Duplicate IDs found: {', '.join(ids)}")


class OrderingViolation(CitedbError):
    """Record ids are not in ascending lexicographic order."""

    def __init__(self, first_offender: str, expected: list[str]) -> None:
        self.first_offender = first_offender
        self.expected = expected
        super().__init__(f"IDs are not in alphabetical order (first out-of-order: {first_offender})")


class NotFoundError(CitedbError):
    """No record has the requested id."""

    def __init__(self, record_id: str) -> None:
        self.record_id = record_id
        super().__init__(f"Entry '{record_id}' not found")


class FetchError(CitedbError):
    """An external metadata source failed."""

    def __init__(self, identifier: str, cause: object) -> None:
        self.identifier = identifier
        self.cause = cause
        super().__init__(f"Failed to fetch {identifier}: {cause}")


class NormalizeError(CitedbError):
    """External metadata is malformed or incomplete."""


class ParseError(NormalizeError):
    """A date or timestamp does not start with a four-digit year."""
