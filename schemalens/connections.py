"""Metadata sources backing the introspection pass."""

from __future__ import annotations

import asyncio
import threading
from typing import Any, Coroutine, Iterable, Mapping, Sequence
from urllib.parse import urlsplit

import asyncpg

from .dialects import H2_MODE_QUERY
from .metadata import MetadataQueryError, TabularResult
from .models import ConnectionProfile


class ConnectionBackendError(RuntimeError):
    """Raised when a metadata source cannot open its connection."""


class AsyncpgMetadataSource:
    """Metadata source that queries PostgreSQL via asyncpg.

    asyncpg is coroutine-based; calls are run on a private event loop thread so
    the introspection pass stays synchronous.
    """

    PRODUCT_NAME = "PostgreSQL"

    _SCHEMA_QUERY = """
        SELECT nspname AS "TABLE_SCHEM",
               current_database() AS "TABLE_CATALOG",
               nspname = current_schema() AS "IS_DEFAULT"
        FROM pg_catalog.pg_namespace
        WHERE nspname !~ '^pg_toast_temp_' AND nspname !~ '^pg_temp_'
        ORDER BY nspname
    """

    def __init__(self, profile: ConnectionProfile, *, connect_timeout: float = 3.0) -> None:
        self._profile = profile
        self._connect_timeout = connect_timeout
        self._loop = asyncio.new_event_loop()
        self._loop_thread = threading.Thread(
            target=self._loop.run_forever,
            name="schemalens-asyncpg-source",
            daemon=True,
        )
        self._loop_thread.start()
        self._conn: Any = None
        self._user_name: str | None = None
        try:
            self._conn = self._run(self._connect())
            self._user_name = self._run(self._conn.fetchval("SELECT current_user"))
        except Exception:
            self.close()
            raise

    @property
    def product_name(self) -> str:
        return self.PRODUCT_NAME

    @property
    def url(self) -> str:
        return jdbc_url(self._profile)

    @property
    def user_name(self) -> str | None:
        return self._user_name or self._profile.user

    def list_schemas(self) -> TabularResult:
        return self.execute(self._SCHEMA_QUERY)

    def execute(self, sql: str) -> TabularResult:
        try:
            records = self._run(self._conn.fetch(sql))
        except Exception as exc:
            raise MetadataQueryError(f"Query failed for '{self._profile.name}': {exc}") from exc
        return records_to_result(records)

    def close(self) -> None:
        """Close the connection and stop the background event loop."""

        if self._conn is not None:
            conn, self._conn = self._conn, None
            try:
                self._run(conn.close())
            except Exception:  # pragma: no cover - best effort cleanup
                pass
        if self._loop.is_running():
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._loop_thread.join(timeout=1)

    def __enter__(self) -> AsyncpgMetadataSource:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _run(self, coro: Coroutine[Any, Any, Any]) -> Any:
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result()

    async def _connect(self) -> Any:
        try:
            return await asyncpg.connect(**connect_kwargs(self._profile, self._connect_timeout))
        except Exception as exc:
            raise ConnectionBackendError(f"Failed to connect to profile '{self._profile.name}': {exc}") from exc


def connect_kwargs(profile: ConnectionProfile, timeout: float) -> dict[str, object]:
    kwargs: dict[str, object] = {}
    if profile.dsn:
        kwargs["dsn"] = profile.dsn
    else:
        kwargs["host"] = profile.host or "localhost"
        if profile.port is not None:
            kwargs["port"] = profile.port
        if profile.user:
            kwargs["user"] = profile.user
        if profile.database:
            kwargs["database"] = profile.database
    kwargs.setdefault("timeout", timeout)
    return kwargs


def jdbc_url(profile: ConnectionProfile) -> str:
    """JDBC-style identifier for a PostgreSQL profile, without credentials."""

    host = profile.host or "localhost"
    port = profile.port
    database = profile.database or ""
    if profile.dsn:
        parts = urlsplit(profile.dsn)
        host = parts.hostname or host
        port = parts.port or port
        database = parts.path.lstrip("/") or database
    netloc = f"{host}:{port}" if port is not None else host
    return f"jdbc:postgresql://{netloc}/{database}"


def records_to_result(records: Iterable[Any]) -> TabularResult:
    rows: list[tuple[object, ...]] = []
    columns: tuple[str, ...] = ()
    for record in records:
        if not columns:
            keys = tuple(record.keys()) if hasattr(record, "keys") else tuple(range(len(record)))
            columns = tuple(str(key) for key in keys)
        if not columns:
            continue
        rows.append(tuple(record[key] for key in columns))
    return TabularResult(columns=columns, rows=tuple(rows))


class DemoMetadataSource:
    """In-memory metadata source, used for demo profiles and tests.

    Every query is recorded in :attr:`queries`. Queries listed in ``results``
    answer with the stored rows; any other query raises
    :class:`MetadataQueryError`, as does :meth:`list_schemas` when
    ``schemas`` is ``None``.
    """

    def __init__(
        self,
        *,
        product_name: str,
        url: str | None,
        user_name: str | None = None,
        schemas: TabularResult | None = None,
        results: Mapping[str, TabularResult] | None = None,
    ) -> None:
        self._product_name = product_name
        self._url = url
        self._user_name = user_name
        self._schemas = schemas
        self._results = dict(results or {})
        self.queries: list[str] = []

    @classmethod
    def from_preset(cls, key: str) -> DemoMetadataSource:
        preset = DEMO_PRESETS.get(key)
        if preset is None:
            raise ConnectionBackendError(f"Unknown demo preset '{key}'.")
        return cls(**preset)

    @property
    def product_name(self) -> str:
        return self._product_name

    @property
    def url(self) -> str | None:
        return self._url

    @property
    def user_name(self) -> str | None:
        return self._user_name

    def list_schemas(self) -> TabularResult:
        self.queries.append("getSchemas")
        if self._schemas is None:
            raise MetadataQueryError("Schema listing is unavailable.")
        return self._schemas

    def execute(self, sql: str) -> TabularResult:
        self.queries.append(sql)
        result = self._results.get(sql)
        if result is None:
            raise MetadataQueryError(f"Unsupported query: {sql}")
        return result

    def close(self) -> None:
        return None

    def __enter__(self) -> DemoMetadataSource:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def schema_rows(names: Sequence[str], *, default: str | None = None) -> TabularResult:
    """Schema listing with an ``IS_DEFAULT`` flag set on ``default``."""

    return TabularResult.from_rows(
        ("TABLE_SCHEM", "TABLE_CATALOG", "IS_DEFAULT"),
        [(name, None, name == default) for name in names],
    )


DEMO_PRESETS: Mapping[str, Mapping[str, Any]] = {
    "h2": {
        "product_name": "H2",
        "url": "jdbc:h2:mem:demo",
        "user_name": "SA",
        "schemas": schema_rows(("INFORMATION_SCHEMA", "PUBLIC", "SALES"), default="PUBLIC"),
        "results": {H2_MODE_QUERY: TabularResult.from_rows(("UPPER(VALUE)",), [("REGULAR",)])},
    },
    "oracle": {
        "product_name": "Oracle",
        "url": "jdbc:oracle:thin:@localhost:1521:XE",
        "user_name": "HR",
        "schemas": TabularResult.from_rows(
            ("TABLE_SCHEM", "TABLE_CATALOG"),
            [("HR", None), ("SYS", None), ("SYSTEM", None), ("XDB", None)],
        ),
    },
    "mssql": {
        "product_name": "Microsoft SQL Server",
        "url": "jdbc:sqlserver://localhost:1433;databaseName=demo",
        "user_name": "sa",
        "schemas": TabularResult.from_rows(
            ("TABLE_SCHEM", "TABLE_CATALOG"),
            [("db_owner", None), ("dbo", None), ("guest", None), ("sys", None)],
        ),
    },
    "sqlite": {
        "product_name": "SQLite",
        "url": "jdbc:sqlite:demo.db",
    },
}


def open_source(profile: ConnectionProfile, *, connect_timeout: float = 3.0) -> AsyncpgMetadataSource | DemoMetadataSource:
    """Open the metadata source for ``profile``: a demo preset or asyncpg."""

    if profile.metadata_key:
        return DemoMetadataSource.from_preset(profile.metadata_key)
    return AsyncpgMetadataSource(profile, connect_timeout=connect_timeout)


__all__ = [
    "AsyncpgMetadataSource",
    "ConnectionBackendError",
    "DEMO_PRESETS",
    "DemoMetadataSource",
    "connect_kwargs",
    "jdbc_url",
    "open_source",
    "records_to_result",
    "schema_rows",
]
