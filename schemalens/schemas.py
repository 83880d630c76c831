"""Schema enumeration and default-schema resolution."""

from __future__ import annotations

import logging
from typing import Sequence

from .metadata import (
    IS_DEFAULT_COLUMN,
    SCHEMA_NAME_COLUMN,
    MetadataQueryError,
    MetadataSource,
    TabularResult,
    as_bool,
    find_column,
    resolve_column,
)
from .models import ConnectionFacts, Dialect, SchemaCatalog, SchemaName, SchemaRecord

LOG = logging.getLogger(__name__)

ORACLE_SYSTEM_SCHEMAS = frozenset(
    {
        "CTXSYS",
        "DIP",
        "DBSNMP",
        "DMSYS",
        "EXFSYS",
        "FLOWS_020100",
        "FLOWS_FILES",
        "MDDATA",
        "MDSYS",
        "MGMT_VIEW",
        "OLAPSYS",
        "ORDSYS",
        "ORDPLUGINS",
        "OUTLN",
        "SI_INFORMTN_SCHEMA",
        "SYS",
        "SYSMAN",
        "SYSTEM",
        "TSMSYS",
        "WMSYS",
        "XDB",
    }
)

MSSQL_SYSTEM_SCHEMAS = frozenset(
    {
        "sys",
        "db_accessadmin",
        "db_backupoperator",
        "db_datareader",
        "db_datawriter",
        "db_ddladmin",
        "db_denydatareader",
        "db_denydatawriter",
        "db_owner",
        "db_securityadmin",
    }
)

SYSTEM_SCHEMAS: dict[Dialect, frozenset[str]] = {
    Dialect.ORACLE: ORACLE_SYSTEM_SCHEMAS,
    Dialect.MSSQLSERVER: MSSQL_SYSTEM_SCHEMAS,
}

MSSQL_DEFAULT_SCHEMA = "dbo"


def enumerate_schemas(facts: ConnectionFacts, source: MetadataSource) -> tuple[SchemaName, ...]:
    """List the schemas visible to the session, in the order the source reports them.

    MySQL and SQLite have no schema namespace and get one unnamed schema;
    Firebird has no schema concept at all. Neither case issues a query.
    Errors from the schema listing propagate to the caller.
    """

    if facts.dialect in (Dialect.MYSQL, Dialect.SQLITE):
        return ("",)
    if facts.dialect is Dialect.FIREBIRD:
        return (None,)
    result = source.list_schemas()
    hidden = SYSTEM_SCHEMAS.get(facts.dialect, frozenset())
    return tuple(name for name in _schema_names(result) if name not in hidden)


def _schema_names(result: TabularResult) -> list[str]:
    index = find_column(result, SCHEMA_NAME_COLUMN, 0)
    # Rows without a name carry nothing to browse.
    return [str(row[index]) for row in result.rows if row[index] is not None]


def default_schema_name(facts: ConnectionFacts, source: MetadataSource) -> SchemaName:
    """Name of the working schema as reported or implied for this dialect.

    Returns ``""`` when the source has no default signal and ``None`` for
    dialects without a schema concept.
    """

    if facts.dialect is Dialect.ORACLE:
        return source.user_name
    if facts.dialect is Dialect.POSTGRESQL:
        return "public"
    if facts.dialect is Dialect.MYSQL:
        return ""
    if facts.dialect is Dialect.DERBY:
        return (source.user_name or "").upper()
    if facts.dialect is Dialect.FIREBIRD:
        return None
    try:
        result = source.list_schemas()
    except MetadataQueryError as exc:
        LOG.debug("Default schema lookup failed", extra={"error": str(exc)})
        return ""
    flag_index = resolve_column(result, IS_DEFAULT_COLUMN)
    if flag_index is None:
        return ""
    name_index = find_column(result, SCHEMA_NAME_COLUMN, 0)
    default = ""
    for row in result.rows:
        if as_bool(row[flag_index]) and row[name_index] is not None:
            default = str(row[name_index])
    return default


def mark_default(names: Sequence[SchemaName], default_name: SchemaName) -> SchemaCatalog:
    """Build the catalog for ``names`` with at most one record flagged default.

    The first name equal to ``default_name`` wins; a ``None`` default accepts
    any schema. When nothing matches, a schema named ``dbo`` is preferred,
    then the shortest name (first one on ties).
    """

    if not names:
        return SchemaCatalog()
    chosen = _matching_index(names, default_name)
    if chosen is None:
        chosen = _fallback_index(names)
    return SchemaCatalog(
        records=tuple(
            SchemaRecord(name=name, is_default=index == chosen)
            for index, name in enumerate(names)
        )
    )


def _matching_index(names: Sequence[SchemaName], default_name: SchemaName) -> int | None:
    for index, name in enumerate(names):
        if default_name is None or name == default_name:
            return index
    return None


def _fallback_index(names: Sequence[SchemaName]) -> int:
    if MSSQL_DEFAULT_SCHEMA in names:
        return names.index(MSSQL_DEFAULT_SCHEMA)
    best = 0
    for index, name in enumerate(names):
        if len(name or "") < len(names[best] or ""):
            best = index
    return best


def build_catalog(facts: ConnectionFacts, source: MetadataSource) -> SchemaCatalog:
    """Enumerate schemas and flag the default one."""

    names = enumerate_schemas(facts, source)
    if not names:
        return SchemaCatalog()
    return mark_default(names, default_schema_name(facts, source))


__all__ = [
    "MSSQL_SYSTEM_SCHEMAS",
    "ORACLE_SYSTEM_SCHEMAS",
    "SYSTEM_SCHEMAS",
    "build_catalog",
    "default_schema_name",
    "enumerate_schemas",
    "mark_default",
]
