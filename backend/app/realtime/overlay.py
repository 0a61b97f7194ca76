"""
Delay overlay: merges live delay signals onto scheduled instants.

Two sources are consulted in a fixed order:
  1. the GTFS-Realtime TripUpdates feed, joined on trip_id (authoritative)
  2. delays scraped from the operator's alerts page, joined on the public
     train number (weaker key, used when the feed is silent or reports 0)
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Mapping, Optional, Sequence

from app.realtime.types import DelayStatus, RealtimeDelay, ScrapedDelay, TripUpdate
from app.schedule.time import round_half_up

logger = logging.getLogger(__name__)


def delay_status(delay_minutes: int, cancelled: bool = False) -> DelayStatus:
    if cancelled:
        return "cancelled"
    if abs(delay_minutes) >= 1:
        return "delayed"
    return "on-time"


def calculate_trip_delay(update: TripUpdate) -> Optional[RealtimeDelay]:
    """
    Largest-magnitude per-stop delay along the trip, in minutes. A skipped or
    cancelled stop marks the whole trip cancelled. Stop updates with no delay
    fields carry no signal.
    """
    if not update.stop_time_updates:
        return None

    max_delay_seconds = 0
    for stop in update.stop_time_updates:
        if stop.is_cancelled:
            return RealtimeDelay(delay_minutes=0, status="cancelled")

        stop_delay = stop.delay_seconds()
        if stop_delay is None:
            continue
        if abs(stop_delay) > abs(max_delay_seconds):
            max_delay_seconds = stop_delay

    minutes = round_half_up(max_delay_seconds / 60.0)
    return RealtimeDelay(delay_minutes=minutes, status=delay_status(minutes))


def trip_delay(
    updates: Iterable[TripUpdate],
    trip_id: str,
    train_number: Optional[str] = None,
) -> Optional[RealtimeDelay]:
    """
    Delay for one trip. Exact trip_id first; with `train_number`, also accept
    feeds that key trips by train number ("169" or "...-169").
    """
    updates = list(updates)
    for update in updates:
        if update.trip_id == trip_id:
            return calculate_trip_delay(update)

    if train_number:
        for update in updates:
            if update.trip_id == train_number or update.trip_id.endswith(f"-{train_number}"):
                return calculate_trip_delay(update)

    return None


def stop_delay(
    updates: Iterable[TripUpdate],
    stop_id: str,
    trip_id: Optional[str] = None,
) -> Optional[RealtimeDelay]:
    """Delay at a single stop, optionally restricted to one trip."""
    for update in updates:
        if trip_id and update.trip_id != trip_id:
            continue
        for stu in update.stop_time_updates:
            if stu.stop_id != stop_id:
                continue
            minutes = round_half_up((stu.delay_seconds() or 0) / 60.0)
            return RealtimeDelay(delay_minutes=minutes, status=delay_status(minutes, stu.is_cancelled))
    return None


class DelayLookup(ABC):
    name: str = "base"

    @abstractmethod
    def lookup(self, trip_id: str, train_number: str) -> Optional[RealtimeDelay]:
        """Return the delay signal for a trip, or None when this source knows nothing about it."""
        raise NotImplementedError


class FeedDelayLookup(DelayLookup):
    name = "gtfs-rt"

    def __init__(self, updates: Iterable[TripUpdate]):
        self._by_trip: dict[str, TripUpdate] = {}
        for update in updates:
            self._by_trip.setdefault(update.trip_id, update)

    def __len__(self) -> int:
        return len(self._by_trip)

    def lookup(self, trip_id: str, train_number: str) -> Optional[RealtimeDelay]:
        update = self._by_trip.get(trip_id)
        if update is None:
            return None
        return calculate_trip_delay(update)


class ScrapedDelayLookup(DelayLookup):
    name = "scraped"

    def __init__(self, delays: Mapping[str, ScrapedDelay]):
        self._delays = dict(delays)

    def __len__(self) -> int:
        return len(self._delays)

    def lookup(self, trip_id: str, train_number: str) -> Optional[RealtimeDelay]:
        scraped = self._delays.get(train_number)
        if scraped is None:
            return None
        return RealtimeDelay(delay_minutes=scraped.delay_minutes, status=delay_status(scraped.delay_minutes))


@dataclass(frozen=True)
class OverlayResult:
    actual_departure: datetime
    actual_arrival: datetime
    has_delay: bool
    delay_minutes: int
    status: DelayStatus
    source: Optional[str]            # lookup name that supplied the signal


def apply_lookups(
    trip_id: str,
    train_number: str,
    scheduled_departure: datetime,
    scheduled_arrival: datetime,
    lookups: Sequence[DelayLookup],
) -> OverlayResult:
    """
    Walk the lookups in priority order. The first nonzero delay is applied to
    both endpoints; a cancellation stops the walk with scheduled times kept.
    """
    for source in lookups:
        signal = source.lookup(trip_id, train_number)
        if signal is None:
            continue

        if signal.status == "cancelled":
            return OverlayResult(
                actual_departure=scheduled_departure,
                actual_arrival=scheduled_arrival,
                has_delay=False,
                delay_minutes=0,
                status="cancelled",
                source=source.name,
            )

        if signal.delay_minutes != 0:
            shift = timedelta(minutes=signal.delay_minutes)
            return OverlayResult(
                actual_departure=scheduled_departure + shift,
                actual_arrival=scheduled_arrival + shift,
                has_delay=True,
                delay_minutes=signal.delay_minutes,
                status=signal.status,
                source=source.name,
            )

    return OverlayResult(
        actual_departure=scheduled_departure,
        actual_arrival=scheduled_arrival,
        has_delay=False,
        delay_minutes=0,
        status="on-time",
        source=None,
    )


def overlay(
    trip_id: str,
    train_number: str,
    scheduled_departure: datetime,
    scheduled_arrival: datetime,
    trip_updates: Iterable[TripUpdate] = (),
    scraped_delays: Optional[Mapping[str, ScrapedDelay]] = None,
) -> OverlayResult:
    lookups = [FeedDelayLookup(trip_updates), ScrapedDelayLookup(scraped_delays or {})]
    return apply_lookups(trip_id, train_number, scheduled_departure, scheduled_arrival, lookups)
