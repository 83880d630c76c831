"""Introspection pass that turns a metadata session into a schema snapshot."""

from __future__ import annotations

import logging
import threading

from .dialects import detect_dialect, quote_identifier
from .metadata import MetadataQueryError, MetadataSource
from .models import ContentsSnapshot, SchemaRecord
from .schemas import build_catalog

LOG = logging.getLogger(__name__)


class IntrospectionError(RuntimeError):
    """Raised when an introspection pass cannot complete."""

    def __init__(self, message: str, *, stage: str) -> None:
        super().__init__(message)
        self.stage = stage


class DatabaseContents:
    """Keeps the schema metadata of one database for the browser.

    Passes are serialized: a second caller blocks until the running pass
    finishes. Each completed pass replaces the published snapshot wholesale.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot: ContentsSnapshot | None = None

    @property
    def snapshot(self) -> ContentsSnapshot | None:
        """Latest completed snapshot, or ``None`` before the first pass."""

        return self._snapshot

    @property
    def default_schema(self) -> SchemaRecord | None:
        if self._snapshot is None:
            return None
        return self._snapshot.catalog.default

    def read_contents(self, source: MetadataSource) -> ContentsSnapshot:
        """Detect the dialect, enumerate schemas and resolve the default one."""

        with self._lock:
            facts = detect_dialect(source)
            try:
                catalog = build_catalog(facts, source)
            except MetadataQueryError as exc:
                raise IntrospectionError(
                    f"Failed to read schemas from {facts.product_name or 'database'}: {exc}",
                    stage="enumerate",
                ) from exc
            snapshot = ContentsSnapshot(facts=facts, catalog=catalog)
            self._snapshot = snapshot
        default = catalog.default
        LOG.info(
            "Read database contents",
            extra={
                "dialect": facts.label,
                "schemas": len(catalog),
                "default_schema": default.name if default else None,
            },
        )
        return snapshot

    def quote_identifier(self, identifier: str | None) -> str | None:
        """Quote ``identifier`` for the dialect of the latest snapshot."""

        if self._snapshot is None:
            raise IntrospectionError("Database contents have not been read yet.", stage="quote")
        return quote_identifier(self._snapshot.facts, identifier)


__all__ = ["DatabaseContents", "IntrospectionError"]
