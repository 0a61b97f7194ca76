import logging
from datetime import datetime, timezone
from typing import Mapping, Optional, Sequence
from zoneinfo import ZoneInfo

from app.core.config import Settings
from app.gtfs.store import DatasetStore
from app.realtime.feed import fetch_trip_updates
from app.realtime.scraped import fetch_scraped_delays
from app.realtime.types import ScrapedDelay, TripUpdate
from app.schedule.mock import mock_trains
from app.schedule.resolver import REASON_NO_DATASET, DepartureBoard, get_scheduled_trains

logger = logging.getLogger(__name__)


def build_departure_board(
    store: DatasetStore,
    cfg: Settings,
    origin: str,
    destination: str,
    when: Optional[datetime] = None,
    *,
    trip_updates: Optional[Sequence[TripUpdate]] = None,
    scraped_delays: Optional[Mapping[str, ScrapedDelay]] = None,
) -> DepartureBoard:
    """
    Fetch whatever live data is reachable, resolve the board, and fall back
    to a synthetic schedule when no timetable could be loaded at all.
    """
    when = when or datetime.now(timezone.utc)

    if trip_updates is None:
        trip_updates = fetch_trip_updates(cfg)
    if scraped_delays is None:
        scraped_delays = fetch_scraped_delays(cfg)

    board = get_scheduled_trains(
        store,
        origin,
        destination,
        when,
        trip_updates=trip_updates,
        scraped_delays=scraped_delays,
        limit=cfg.result_limit,
        tz=ZoneInfo(cfg.timezone),
    )

    if board.reason == REASON_NO_DATASET:
        logger.warning("No GTFS timetable available; serving placeholder schedule %s -> %s", origin, destination)
        return board.with_trains(
            mock_trains(origin, destination, when, limit=cfg.result_limit),
            is_synthetic=True,
            used_fallback_data=True,
        )

    return board
