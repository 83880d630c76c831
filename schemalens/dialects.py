"""Dialect detection and identifier quoting."""

from __future__ import annotations

import logging

from sqlglot import exp

from .metadata import MetadataQueryError, MetadataSource
from .models import ConnectionFacts, Dialect

LOG = logging.getLogger(__name__)

H2_URL_PREFIX = "jdbc:h2:"

# Checked in order; the first matching prefix wins.
URL_PREFIXES: tuple[tuple[str, Dialect], ...] = (
    (H2_URL_PREFIX, Dialect.H2),
    ("jdbc:oracle:", Dialect.ORACLE),
    ("jdbc:postgresql:", Dialect.POSTGRESQL),
    ("jdbc:mysql:", Dialect.MYSQL),
    ("jdbc:derby:", Dialect.DERBY),
    ("jdbc:firebirdsql:", Dialect.FIREBIRD),
    ("jdbc:sqlserver:", Dialect.MSSQLSERVER),
)

H2_MODE_QUERY = "SELECT UPPER(VALUE) FROM INFORMATION_SCHEMA.SETTINGS WHERE NAME='MODE'"


def dialect_for(product_name: str | None, url: str | None) -> Dialect:
    """Classify a product name and connection identifier without any I/O."""

    if product_name and "sqlite" in product_name.lower():
        return Dialect.SQLITE
    if url is not None:
        for prefix, dialect in URL_PREFIXES:
            if url.startswith(prefix):
                return dialect
    return Dialect.GENERIC


def detect_dialect(source: MetadataSource) -> ConnectionFacts:
    """Build the connection facts for ``source``.

    For H2 one extra query checks whether the database runs in MySQL
    compatibility mode. That probe never fails detection.
    """

    product_name = source.product_name or ""
    url = source.url
    dialect = dialect_for(product_name, url)
    mysql_mode = dialect is Dialect.H2 and _probe_mysql_mode(source)
    facts = ConnectionFacts(dialect=dialect, product_name=product_name, url=url, mysql_mode=mysql_mode)
    LOG.debug("Detected dialect", extra={"dialect": facts.label, "url": url})
    return facts


def _probe_mysql_mode(source: MetadataSource) -> bool:
    try:
        result = source.execute(H2_MODE_QUERY)
    except MetadataQueryError as exc:
        LOG.debug("Compatibility mode probe failed", extra={"error": str(exc)})
        return False
    if not result.rows or not result.rows[0]:
        return False
    return result.rows[0][0] == "MYSQL"


def quote_native(identifier: str) -> str:
    """Always-quoted form used by H2: double quotes, embedded quotes doubled."""

    return exp.to_identifier(identifier, quoted=True).sql()


def quote_identifier(facts: ConnectionFacts, identifier: str | None) -> str | None:
    """Return ``identifier`` in the form queries against this database should use."""

    if identifier is None:
        return None
    if facts.is_h2 and not facts.mysql_mode:
        return quote_native(identifier)
    return identifier.upper()


__all__ = [
    "H2_MODE_QUERY",
    "URL_PREFIXES",
    "detect_dialect",
    "dialect_for",
    "quote_identifier",
    "quote_native",
]
