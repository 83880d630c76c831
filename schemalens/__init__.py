"""Dialect-aware schema introspection for database browsing."""

from __future__ import annotations

from .contents import DatabaseContents, IntrospectionError
from .dialects import detect_dialect, quote_identifier
from .metadata import MetadataQueryError, MetadataSource, TabularResult, find_column
from .models import ConnectionFacts, ContentsSnapshot, Dialect, SchemaCatalog, SchemaRecord

__version__ = "0.1.0"

__all__ = [
    "ConnectionFacts",
    "ContentsSnapshot",
    "DatabaseContents",
    "Dialect",
    "IntrospectionError",
    "MetadataQueryError",
    "MetadataSource",
    "SchemaCatalog",
    "SchemaRecord",
    "TabularResult",
    "__version__",
    "detect_dialect",
    "find_column",
    "quote_identifier",
]
