"""Shared dataclasses describing a database's structural metadata."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

# ``None`` marks a dialect without any schema concept; ``""`` is the single
# unnamed schema of a dialect without a schema namespace.
SchemaName = str | None


class Dialect(str, Enum):
    """Database products with dedicated metadata handling."""

    ORACLE = "oracle"
    H2 = "h2"
    POSTGRESQL = "postgresql"
    DERBY = "derby"
    SQLITE = "sqlite"
    MYSQL = "mysql"
    FIREBIRD = "firebird"
    MSSQLSERVER = "mssqlserver"
    GENERIC = "generic"


@dataclass(frozen=True, slots=True)
class ConnectionFacts:
    """Result of dialect detection for one metadata session."""

    dialect: Dialect
    product_name: str
    url: str | None = None
    mysql_mode: bool = False

    @property
    def label(self) -> str:
        if self.dialect is Dialect.H2 and self.mysql_mode:
            return "H2-MySQL-mode"
        return self.dialect.value

    @property
    def is_oracle(self) -> bool:
        return self.dialect is Dialect.ORACLE

    @property
    def is_h2(self) -> bool:
        return self.dialect is Dialect.H2

    @property
    def is_h2_mysql_mode(self) -> bool:
        return self.dialect is Dialect.H2 and self.mysql_mode

    @property
    def is_postgresql(self) -> bool:
        return self.dialect is Dialect.POSTGRESQL

    @property
    def is_derby(self) -> bool:
        return self.dialect is Dialect.DERBY

    @property
    def is_sqlite(self) -> bool:
        return self.dialect is Dialect.SQLITE

    @property
    def is_mysql(self) -> bool:
        return self.dialect is Dialect.MYSQL

    @property
    def is_firebird(self) -> bool:
        return self.dialect is Dialect.FIREBIRD

    @property
    def is_mssqlserver(self) -> bool:
        return self.dialect is Dialect.MSSQLSERVER


@dataclass(frozen=True, slots=True)
class SchemaRecord:
    """One enumerated schema and whether it is the working schema."""

    name: SchemaName
    is_default: bool = False


@dataclass(frozen=True, slots=True)
class SchemaCatalog:
    """Ordered schemas produced by one introspection pass."""

    records: tuple[SchemaRecord, ...] = ()

    def __iter__(self) -> Iterator[SchemaRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    @property
    def names(self) -> tuple[SchemaName, ...]:
        return tuple(record.name for record in self.records)

    @property
    def default(self) -> SchemaRecord | None:
        """The default schema record, if one was resolved."""

        for record in self.records:
            if record.is_default:
                return record
        return None


@dataclass(frozen=True, slots=True)
class ContentsSnapshot:
    """Published result of a completed introspection pass."""

    facts: ConnectionFacts
    catalog: SchemaCatalog

    @property
    def default_schema(self) -> SchemaRecord | None:
        return self.catalog.default


@dataclass(frozen=True, slots=True)
class ConnectionProfile:
    """Runtime representation of a connection profile."""

    name: str
    dsn: str | None = None
    host: str | None = None
    port: int | None = None
    database: str | None = None
    user: str | None = None
    metadata_key: str | None = None


__all__ = [
    "ConnectionFacts",
    "ConnectionProfile",
    "ContentsSnapshot",
    "Dialect",
    "SchemaCatalog",
    "SchemaName",
    "SchemaRecord",
]
