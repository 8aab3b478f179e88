"""Tests for database validation."""

from __future__ import annotations

import json

import pytest

from citedb import Store, Validator
from citedb.errors import (
    DuplicateIdError,
    OrderingViolation,
    SchemaFormatError,
    SchemaViolation,
    StoreFormatError,
    StoreIOError,
)
from citedb.validator import (
    CHECK_DUPLICATES,
    CHECK_FORMAT,
    CHECK_ORDER,
    CHECK_SCHEMA,
    find_duplicates,
    first_out_of_order,
    load_schema,
    schema_violations,
)


@pytest.fixture
def validator(schema):
    return Validator(schema)


class TestValidDatabase:
    def test_all_checks_pass(self, validator, store):
        report = validator.validate(store)
        assert report.ok
        assert report.entry_count == 3
        assert [c.name for c in report.checks] == [CHECK_FORMAT, CHECK_SCHEMA, CHECK_DUPLICATES, CHECK_ORDER]
        report.raise_for_status()

    def test_validate_path(self, schema_path, db_path):
        report = Validator.from_path(schema_path).validate_path(db_path)
        assert report.ok

    def test_empty_database(self, validator):
        assert validator.validate(Store.from_entries([])).ok


class TestSchemaCheck:
    def test_collects_every_violation(self, validator, make_entry):
        store = Store.from_entries(
            [
                make_entry(id="a2020x", doi="doi:10.1/x"),
                make_entry(id="b2020y", authors=[]),
                make_entry(id="c2020z", year="2020"),
            ]
        )
        report = validator.validate(store)
        assert not report.ok
        locations = [loc for loc, _ in report.violations]
        assert "/0/doi" in locations
        assert "/1/authors" in locations
        assert "/2/year" in locations
        assert report.check(CHECK_SCHEMA).passed is False
        assert report.check(CHECK_DUPLICATES).passed is True
        with pytest.raises(SchemaViolation) as exc:
            report.raise_for_status()
        assert len(exc.value.violations) == 3

    def test_missing_required_field(self, validator, make_entry):
        entry = make_entry()
        del entry["title"]
        report = validator.validate(Store.from_entries([entry]))
        assert report.violations == [("/0", "'title' is a required property")]

    def test_unknown_field_rejected(self, validator, make_entry):
        report = validator.validate(Store.from_entries([make_entry(shelf="B3")]))
        assert [loc for loc, _ in report.violations] == ["/0"]

    def test_bad_added_date(self, validator, make_entry):
        report = validator.validate(Store.from_entries([make_entry(added="18/10/2026")]))
        assert [loc for loc, _ in report.violations] == ["/0/added"]

    def test_bad_url(self, validator, make_entry):
        report = validator.validate(Store.from_entries([make_entry(id="a2020x", url="not a uri at all")]))
        assert [loc for loc, _ in report.violations] == ["/0/url"]

    def test_valid_url(self, validator, make_entry):
        entry = make_entry(url="https://www.clawxiv.org/abs/clawxiv.2602.00011")
        assert validator.validate(Store.from_entries([entry])).ok

    def test_top_level_location(self, validator):
        report = validator.validate(Store.from_entries([]))
        assert report.violations == []
        assert schema_violations({"id": "x"}, validator.schema)[0][0] == "(root)"  # type: ignore[arg-type]


class TestDuplicateCheck:
    def test_reports_exactly_the_duplicate(self, validator, make_entry):
        store = Store.from_entries(
            [make_entry(id="a2020x"), make_entry(id="b2020y", authors=[]), make_entry(id="b2020y", year="bad")]
        )
        report = validator.validate(store)
        assert report.duplicates == ["b2020y"]
        assert not report.ok
        assert report.check(CHECK_DUPLICATES).passed is False

    def test_duplicates_do_not_fail_ordering(self, validator, make_entry):
        store = Store.from_entries([make_entry(id="a"), make_entry(id="a")])
        report = validator.validate(store)
        assert report.check(CHECK_ORDER).passed is True
        with pytest.raises(DuplicateIdError, match="a"):
            report.raise_for_status()

    def test_entries_without_id_are_only_schema_violations(self, validator, make_entry):
        first, second = make_entry(id="a2020x"), make_entry(id="b2020y")
        del first["id"], second["id"]
        report = validator.validate(Store.from_entries([first, second, make_entry(id="c2020z")]))
        assert report.duplicates == []
        assert report.check(CHECK_DUPLICATES).passed is True
        assert report.check(CHECK_ORDER).passed is True
        assert [loc for loc, _ in report.violations] == ["/0", "/1"]

    def test_find_duplicates_each_once(self):
        assert find_duplicates(["a", "b", "a", "c", "b", "a"]) == ["a", "b"]
        assert find_duplicates(["a", "b"]) == []


class TestOrderCheck:
    def test_reports_first_offender_and_expected_order(self, validator, make_entry):
        store = Store.from_entries([make_entry(id="b2020x"), make_entry(id="a2020x"), make_entry(id="c2020x")])
        report = validator.validate(store)
        assert report.first_out_of_order == "b2020x"
        assert report.expected_order == ["a2020x", "b2020x", "c2020x"]
        assert report.check(CHECK_SCHEMA).passed is True
        with pytest.raises(OrderingViolation) as exc:
            report.raise_for_status()
        assert exc.value.first_offender == "b2020x"

    def test_first_out_of_order_sorted(self):
        assert first_out_of_order(["a", "b"]) == (None, ["a", "b"])

    def test_codepoint_order(self):
        """Digits sort before underscore, which sorts before lowercase letters."""
        assert first_out_of_order(["a1", "a_", "ab"])[0] is None


class TestFormatCheck:
    def test_unparseable_database(self, validator, tmp_path):
        path = tmp_path / "citations.json"
        path.write_text('{"not": "an array"}', encoding="utf-8")
        report = validator.validate_path(path)
        assert not report.ok
        assert report.check(CHECK_FORMAT).passed is False
        assert all(report.check(n).skipped for n in (CHECK_SCHEMA, CHECK_DUPLICATES, CHECK_ORDER))
        with pytest.raises(StoreFormatError):
            report.raise_for_status()

    def test_unreadable_database_raises(self, validator, tmp_path):
        with pytest.raises(StoreIOError):
            validator.validate_path(tmp_path / "missing.json")


class TestLoadSchema:
    def test_bundled_schema_loads(self, schema_path):
        assert load_schema(schema_path)["type"] == "array"

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "schema.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(SchemaFormatError):
            load_schema(path)

    def test_invalid_schema(self, tmp_path):
        path = tmp_path / "schema.json"
        path.write_text(json.dumps({"type": 12}), encoding="utf-8")
        with pytest.raises(SchemaFormatError, match="not a valid JSON Schema"):
            load_schema(path)

    def test_missing_schema(self, tmp_path):
        with pytest.raises(SchemaFormatError):
            load_schema(tmp_path / "none.json")


def test_report_to_dict(validator, store):
    summary = validator.validate(store).to_dict()
    assert summary["ok"] is True
    assert summary["checks"] == {"format": "pass", "schema": "pass", "duplicates": "pass", "order": "pass"}
