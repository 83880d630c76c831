"""Tests for metadata result helpers."""

from __future__ import annotations

import pytest

from schemalens.metadata import TabularResult, as_bool, find_column, resolve_column


def _result() -> TabularResult:
    return TabularResult.from_rows(("TABLE_SCHEM", "TABLE_CATALOG", "IS_DEFAULT"), [("PUBLIC", "DB", True)])


def test_resolve_column_is_case_insensitive() -> None:
    result = _result()

    assert resolve_column(result, "table_schem") == 0
    assert resolve_column(result, "IS_DEFAULT") == 2


def test_resolve_column_reports_missing_column() -> None:
    assert resolve_column(_result(), "REMARKS") is None


def test_find_column_uses_default_index_when_missing() -> None:
    result = TabularResult.from_rows(("SCHEMA_NAME",), [("PUBLIC",)])

    assert find_column(result, "TABLE_SCHEM", 0) == 0
    assert find_column(_result(), "TABLE_CATALOG", 0) == 1


@pytest.mark.parametrize(
    ("value", "expected"),
    [(True, True), (False, False), (None, False), (1, True), (0, False), ("YES", True), ("true", True), ("no", False)],
)
def test_as_bool_interprets_driver_flags(value: object, expected: bool) -> None:
    assert as_bool(value) is expected
