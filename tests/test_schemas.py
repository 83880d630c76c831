"""Tests for schema enumeration and default-schema resolution."""

from __future__ import annotations

import pytest

from schemalens.connections import DemoMetadataSource, schema_rows
from schemalens.metadata import MetadataQueryError, TabularResult
from schemalens.models import ConnectionFacts, Dialect
from schemalens.schemas import (
    MSSQL_SYSTEM_SCHEMAS,
    ORACLE_SYSTEM_SCHEMAS,
    build_catalog,
    default_schema_name,
    enumerate_schemas,
    mark_default,
)


def _facts(dialect: Dialect) -> ConnectionFacts:
    return ConnectionFacts(dialect=dialect, product_name=dialect.value)


def _source(names: list[str] | None = None, **kwargs: object) -> DemoMetadataSource:
    schemas = TabularResult.from_rows(("TABLE_SCHEM", "TABLE_CATALOG"), [(n, None) for n in names]) if names is not None else None
    return DemoMetadataSource(product_name="db", url=None, schemas=schemas, **kwargs)  # type: ignore[arg-type]


@pytest.mark.parametrize("dialect", [Dialect.MYSQL, Dialect.SQLITE])
def test_no_namespace_dialects_yield_one_unnamed_schema(dialect: Dialect) -> None:
    source = _source(["a", "b"])

    assert enumerate_schemas(_facts(dialect), source) == ("",)
    assert source.queries == []


def test_firebird_yields_absent_schema_without_query() -> None:
    source = _source(["a"])

    assert enumerate_schemas(_facts(Dialect.FIREBIRD), source) == (None,)
    assert source.queries == []


def test_oracle_system_schemas_are_dropped_in_order() -> None:
    names = ["HR", "SYS", "APP", "XDB", "SCOTT", "SYSTEM"]

    result = enumerate_schemas(_facts(Dialect.ORACLE), _source(names))

    assert result == ("HR", "APP", "SCOTT")
    assert not set(result) & ORACLE_SYSTEM_SCHEMAS


def test_mssql_system_schemas_are_dropped_in_order() -> None:
    names = ["db_owner", "dbo", "sys", "guest", "sales", "db_securityadmin"]

    result = enumerate_schemas(_facts(Dialect.MSSQLSERVER), _source(names))

    assert result == ("dbo", "guest", "sales")
    assert not set(result) & MSSQL_SYSTEM_SCHEMAS


def test_denylists_are_vendor_specific() -> None:
    names = ["SYS", "sys", "db_owner", "PUBLIC"]

    assert enumerate_schemas(_facts(Dialect.H2), _source(names)) == tuple(names)
    assert enumerate_schemas(_facts(Dialect.ORACLE), _source(names)) == ("sys", "db_owner", "PUBLIC")


def test_enumeration_keeps_duplicates_and_order() -> None:
    names = ["b", "a", "b"]

    assert enumerate_schemas(_facts(Dialect.GENERIC), _source(names)) == ("b", "a", "b")


def test_enumeration_falls_back_to_first_column_when_label_differs() -> None:
    rows = TabularResult.from_rows(("schema_name", "catalog"), [("one", None), ("two", None)])
    source = DemoMetadataSource(product_name="db", url=None, schemas=rows)

    assert enumerate_schemas(_facts(Dialect.GENERIC), source) == ("one", "two")


def test_enumeration_failure_propagates() -> None:
    with pytest.raises(MetadataQueryError):
        enumerate_schemas(_facts(Dialect.GENERIC), _source(None))


def test_explicit_default_rules() -> None:
    source = _source(["x"], user_name="scott")

    assert default_schema_name(_facts(Dialect.ORACLE), source) == "scott"
    assert default_schema_name(_facts(Dialect.POSTGRESQL), source) == "public"
    assert default_schema_name(_facts(Dialect.MYSQL), source) == ""
    assert default_schema_name(_facts(Dialect.DERBY), source) == "SCOTT"
    assert default_schema_name(_facts(Dialect.FIREBIRD), source) is None
    assert source.queries == []


def test_generic_default_takes_last_flagged_row() -> None:
    rows = TabularResult.from_rows(
        ("TABLE_SCHEM", "IS_DEFAULT"),
        [(f"s{i}", i in (2, 5)) for i in range(7)],
    )
    source = DemoMetadataSource(product_name="db", url=None, schemas=rows)

    assert default_schema_name(_facts(Dialect.GENERIC), source) == "s5"


def test_generic_default_without_flag_column_is_empty() -> None:
    assert default_schema_name(_facts(Dialect.H2), _source(["A", "B"])) == ""


def test_generic_default_tolerates_query_failure() -> None:
    assert default_schema_name(_facts(Dialect.SQLITE), _source(None)) == ""


def test_generic_default_reads_string_flags() -> None:
    rows = TabularResult.from_rows(("TABLE_SCHEM", "is_default"), [("A", "NO"), ("B", "YES"), ("C", "no")])
    source = DemoMetadataSource(product_name="db", url=None, schemas=rows)

    assert default_schema_name(_facts(Dialect.GENERIC), source) == "B"


def test_mark_default_flags_first_exact_match() -> None:
    catalog = mark_default(["A", "PUBLIC", "PUBLIC"], "PUBLIC")

    assert [r.is_default for r in catalog] == [False, True, False]
    assert catalog.default is not None and catalog.default.name == "PUBLIC"


def test_absent_default_accepts_first_schema() -> None:
    catalog = mark_default([None], None)

    assert catalog.default is not None and catalog.default.name is None


def test_fallback_prefers_dbo_over_shorter_names() -> None:
    catalog = mark_default(["AB", "dbo", "A"], "")

    assert catalog.default is not None and catalog.default.name == "dbo"


def test_fallback_picks_first_shortest_name() -> None:
    assert mark_default(["AB", "A", "ABC"], "").default.name == "A"  # type: ignore[union-attr]
    assert mark_default(["BB", "C", "D"], "missing").default.name == "C"  # type: ignore[union-attr]


def test_empty_names_yield_empty_catalog() -> None:
    catalog = mark_default([], "x")

    assert len(catalog) == 0
    assert catalog.default is None


def test_build_catalog_marks_exactly_one_default() -> None:
    source = DemoMetadataSource(
        product_name="H2",
        url="jdbc:h2:mem:test",
        schemas=schema_rows(["INFORMATION_SCHEMA", "PUBLIC", "APP"], default="PUBLIC"),
    )

    catalog = build_catalog(_facts(Dialect.H2), source)

    assert catalog.names == ("INFORMATION_SCHEMA", "PUBLIC", "APP")
    assert [r.name for r in catalog if r.is_default] == ["PUBLIC"]


def test_build_catalog_skips_default_lookup_when_empty() -> None:
    source = _source([])

    catalog = build_catalog(_facts(Dialect.GENERIC), source)

    assert len(catalog) == 0
    assert source.queries == ["getSchemas"]


def test_oracle_user_schema_becomes_default() -> None:
    source = _source(["SYS", "HR", "SCOTT"], user_name="SCOTT")

    catalog = build_catalog(_facts(Dialect.ORACLE), source)

    assert catalog.names == ("HR", "SCOTT")
    assert catalog.default is not None and catalog.default.name == "SCOTT"
