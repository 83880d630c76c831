"""Boundary types for the metadata-query capability used during introspection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, Sequence, runtime_checkable

SCHEMA_NAME_COLUMN = "TABLE_SCHEM"
IS_DEFAULT_COLUMN = "IS_DEFAULT"


class MetadataQueryError(RuntimeError):
    """Raised when a metadata source cannot answer a query."""


@dataclass(frozen=True, slots=True)
class TabularResult:
    """Rows returned by a metadata query, addressed by column name or position."""

    columns: tuple[str, ...]
    rows: tuple[tuple[Any, ...], ...] = ()

    @classmethod
    def from_rows(cls, columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> TabularResult:
        return cls(columns=tuple(columns), rows=tuple(tuple(row) for row in rows))


@runtime_checkable
class MetadataSource(Protocol):
    """Synchronous metadata capability for one database session."""

    @property
    def product_name(self) -> str:
        """Database product name reported by the driver."""

    @property
    def url(self) -> str | None:
        """Connection identifier, e.g. ``jdbc:h2:mem:test``."""

    @property
    def user_name(self) -> str | None:
        """Authenticated user for the session."""

    def list_schemas(self) -> TabularResult:
        """Return the schema listing (``TABLE_SCHEM`` and optionally ``IS_DEFAULT``)."""

    def execute(self, sql: str) -> TabularResult:
        """Run an arbitrary query and return its rows."""


def resolve_column(result: TabularResult, name: str) -> int | None:
    """Return the position of ``name`` in ``result`` or ``None`` if it is absent.

    Matching is case-insensitive, like driver-level column lookup.
    """

    wanted = name.lower()
    for index, column in enumerate(result.columns):
        if column.lower() == wanted:
            return index
    return None


def find_column(result: TabularResult, name: str, default_index: int) -> int:
    """Return the position of ``name``, or ``default_index`` when it cannot be resolved.

    Some drivers report schema listings with non-standard column labels; the
    positional fallback keeps those readable.
    """

    index = resolve_column(result, name)
    if index is None:
        return default_index
    return index


def as_bool(value: object) -> bool:
    """Interpret a driver-reported flag the way result-set boolean getters do."""

    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in {"1", "t", "true", "y", "yes"}


__all__ = [
    "IS_DEFAULT_COLUMN",
    "MetadataQueryError",
    "MetadataSource",
    "SCHEMA_NAME_COLUMN",
    "TabularResult",
    "as_bool",
    "find_column",
    "resolve_column",
]
