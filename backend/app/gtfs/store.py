import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from app.core.config import Settings
from app.errors import DatasetUnavailable, LoadError
from app.gtfs.parser import build_snapshot
from app.gtfs.sources.base import BaseSource
from app.gtfs.sources.local import LocalDirectorySource
from app.gtfs.sources.remote import RemoteArchiveSource
from app.gtfs.types import DatasetReady, DatasetSnapshot

logger = logging.getLogger(__name__)

CACHE_DURATION_HOURS = 24.0


class DatasetStore:
    """
    Holds the current GTFS static snapshot.

    Readers grab `snapshot` once per request. A reload builds a complete new
    snapshot and swaps it in with a single assignment, so a reader never sees a
    half-loaded dataset. Concurrent reloads are not suppressed; the last one wins.
    """

    def __init__(
        self,
        sources: Sequence[BaseSource],
        *,
        cache_hours: float = CACHE_DURATION_HOURS,
        snapshot: Optional[DatasetSnapshot] = None,
    ):
        self.sources = list(sources)
        self.cache_duration = timedelta(hours=cache_hours)
        self._snapshot = snapshot
        self.last_error: Optional[str] = None

    @classmethod
    def from_settings(cls, cfg: Settings, *, local_only: bool = False) -> "DatasetStore":
        sources: list[BaseSource] = []
        if local_only:
            logger.info("Remote GTFS archive skipped; using local files only")
        elif cfg.remote_enabled:
            sources.append(RemoteArchiveSource(cfg))
        else:
            logger.info("TRANSIT_API_KEY not configured; using local GTFS files only")
        sources.append(LocalDirectorySource(cfg.local_dir))
        return cls(sources, cache_hours=cfg.cache_hours)

    @property
    def snapshot(self) -> Optional[DatasetSnapshot]:
        return self._snapshot

    @property
    def primary_source(self) -> Optional[str]:
        return self.sources[0].name if self.sources else None

    def is_fresh(self, now: Optional[datetime] = None) -> bool:
        snap = self._snapshot
        if snap is None:
            return False
        now = now or datetime.now(timezone.utc)
        return now - snap.last_refreshed < self.cache_duration

    def ensure_fresh(self, now: Optional[datetime] = None) -> DatasetReady:
        now = now or datetime.now(timezone.utc)

        if self.is_fresh(now):
            snap = self._snapshot
            logger.debug(
                "GTFS cache valid (age=%s source=%s)", now - snap.last_refreshed, snap.source
            )
            return DatasetReady(snapshot=snap, stale=False)

        fresh = self._reload(now)
        if fresh is not None:
            self._snapshot = fresh
            self.last_error = None
            return DatasetReady(snapshot=fresh, stale=False)

        previous = self._snapshot
        if previous is None:
            raise DatasetUnavailable(f"GTFS data unavailable: {self.last_error}")

        logger.warning(
            "All GTFS sources failed; serving stale %s snapshot from %s",
            previous.source,
            previous.last_refreshed.isoformat(),
        )
        return DatasetReady(snapshot=previous, stale=True)

    def _reload(self, now: datetime) -> Optional[DatasetSnapshot]:
        for source in self.sources:
            try:
                tables = source.fetch_tables()
                snapshot = build_snapshot(tables, source=source.name, now=now)
            except LoadError as e:
                self.last_error = str(e)
                logger.error("GTFS %s source failed, trying next: %s", source.name, e)
                continue

            if not snapshot.trips:
                self.last_error = f"{source.name} dataset has no trips"
                logger.error("GTFS %s source returned no trips, trying next", source.name)
                continue

            logger.info(
                "GTFS data loaded from %s: %d stop times, %d trips",
                source.name,
                len(snapshot.stop_times),
                len(snapshot.trips),
            )
            return snapshot
        return None

    def status(self, now: Optional[datetime] = None) -> dict:
        snap = self._snapshot
        if snap is None:
            return {"loaded": False, "fresh": False, "last_error": self.last_error}
        return {
            "loaded": True,
            "fresh": self.is_fresh(now),
            "source": snap.source,
            "last_refreshed": snap.last_refreshed.isoformat(),
            "last_error": self.last_error,
            **snap.counts(),
        }
