"""Session manager publishing schema snapshots for the active profile."""

from __future__ import annotations

import logging
import time
from contextlib import closing
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Protocol

from .config import AppConfig, ConnectionProfileConfig
from .connections import ConnectionBackendError, open_source
from .contents import DatabaseContents, IntrospectionError
from .dialects import quote_identifier
from .metadata import MetadataSource
from .models import ConnectionProfile, ContentsSnapshot

LOG = logging.getLogger(__name__)

SessionListener = Callable[["SessionState"], None]


class ClosableSource(MetadataSource, Protocol):
    def close(self) -> None: ...


SourceFactory = Callable[[ConnectionProfile], ClosableSource]


@dataclass(frozen=True, slots=True)
class SessionState:
    """Current session snapshot (active profile + schema metadata)."""

    profile: ConnectionProfile
    snapshot: ContentsSnapshot
    refreshed_at: datetime
    latency_ms: int

    @property
    def schemas(self) -> tuple[str | None, ...]:
        return self.snapshot.catalog.names

    @property
    def default_schema(self) -> str | None:
        record = self.snapshot.catalog.default
        return record.name if record else None


class SessionManager:
    """Reads database contents for the selected profile and notifies listeners."""

    def __init__(
        self,
        *,
        config: AppConfig,
        source_factory: SourceFactory | None = None,
    ) -> None:
        self._config = config
        self._profiles = tuple(self._from_config(entry) for entry in config.profiles)
        self._source_factory = source_factory or self._default_factory
        self._listeners: set[SessionListener] = set()
        self._state: SessionState | None = None
        self._contents: dict[str, DatabaseContents] = {}
        active_name = config.active_profile or (self._profiles[0].name if self._profiles else None)
        if active_name and self._profiles:
            try:
                self.connect(active_name)
            except (ConnectionBackendError, IntrospectionError) as exc:
                LOG.warning(
                    "Failed to read initial profile",
                    extra={"profile": active_name, "error": str(exc)},
                )
                self._state = None

    @property
    def profiles(self) -> tuple[ConnectionProfile, ...]:
        """Profiles available in the current config."""

        return self._profiles

    @property
    def state(self) -> SessionState | None:
        """Current session state."""

        return self._state

    @property
    def active_profile_name(self) -> str | None:
        if self._state:
            return self._state.profile.name
        return None

    def connect(self, name: str) -> SessionState:
        """Activate the requested profile and read its contents.

        A failed pass leaves the previous state published and re-raises.
        """

        profile = self._profile_by_name(name)
        started = time.perf_counter()
        contents = self._contents.setdefault(profile.name, DatabaseContents())
        with closing(self._source_factory(profile)) as source:
            snapshot = contents.read_contents(source)
        latency_ms = int((time.perf_counter() - started) * 1000)
        self._state = SessionState(
            profile=profile,
            snapshot=snapshot,
            refreshed_at=datetime.now(tz=timezone.utc),
            latency_ms=latency_ms,
        )
        self._notify()
        return self._state

    def refresh_active_profile(self) -> SessionState | None:
        """Re-read the contents of the active profile."""

        if not self._state:
            return None
        return self.connect(self._state.profile.name)

    def quote_identifier(self, identifier: str | None) -> str | None:
        """Quote ``identifier`` for the active profile's database."""

        if not self._state:
            raise IntrospectionError("No active profile.", stage="quote")
        return quote_identifier(self._state.snapshot.facts, identifier)

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Subscribe to session updates; returns an unsubscribe handle."""

        self._listeners.add(listener)
        if self._state:
            listener(self._state)

        def _unsubscribe() -> None:
            self._listeners.discard(listener)

        return _unsubscribe

    def _default_factory(self, profile: ConnectionProfile) -> ClosableSource:
        return open_source(profile, connect_timeout=self._config.connect_timeout)

    def _profile_by_name(self, name: str) -> ConnectionProfile:
        for profile in self._profiles:
            if profile.name == name:
                return profile
        raise ValueError(f"Profile '{name}' not found.")

    @staticmethod
    def _from_config(profile: ConnectionProfileConfig) -> ConnectionProfile:
        return ConnectionProfile(
            name=profile.name,
            dsn=profile.dsn,
            host=profile.host,
            port=profile.port,
            database=profile.database,
            user=profile.user,
            metadata_key=profile.metadata_key,
        )

    def _notify(self) -> None:
        if not self._state:
            return
        for listener in tuple(self._listeners):
            listener(self._state)


__all__ = ["SessionManager", "SessionState"]
