import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone, tzinfo
from typing import Iterable, Mapping, Optional, Sequence

from app.errors import LoadError, ResolutionError
from app.gtfs.store import DatasetStore
from app.gtfs.types import DatasetSnapshot
from app.realtime.overlay import DelayLookup, FeedDelayLookup, ScrapedDelayLookup, apply_lookups
from app.realtime.types import ScrapedDelay, TripUpdate
from app.schedule.calendar import active_service, service_day
from app.schedule.selection import DEFAULT_LIMIT, Candidate, classify, select
from app.schedule.stations import CALTRAIN_STATIONS, Station, find_station, station_index
from app.schedule.stops import NORTHBOUND, SOUTHBOUND, stop_id
from app.schedule.time import TRANSIT_TZ, duration_minutes, materialize

logger = logging.getLogger(__name__)

REASON_NO_DATASET = "dataset_unavailable"
REASON_NO_SERVICE = "no_active_service"
REASON_BAD_STATION = "station_not_found"


@dataclass(frozen=True)
class ResolvedTrain:
    train_number: str
    trip_id: str
    direction: str                   # "Northbound" | "Southbound"
    departure_time: datetime         # scheduled, origin
    arrival_time: datetime           # scheduled, destination
    duration_minutes: int
    type: str                        # "Local" | "Limited" | "Express"

    status: str = "on-time"          # "on-time" | "delayed" | "cancelled"
    delay_minutes: int = 0
    actual_departure_time: Optional[datetime] = None
    actual_arrival_time: Optional[datetime] = None


@dataclass(frozen=True)
class DepartureBoard:
    trains: tuple[ResolvedTrain, ...] = ()
    used_fallback_data: bool = False
    is_synthetic: bool = False
    dataset_source: Optional[str] = None
    dataset_stale: bool = False
    realtime_sources: tuple[str, ...] = ()
    low_confidence_stops: tuple[str, ...] = ()
    reason: Optional[str] = None     # why the board is empty, when it is

    def with_trains(self, trains: Iterable[ResolvedTrain], **changes) -> "DepartureBoard":
        return replace(self, trains=tuple(trains), **changes)


@dataclass
class _Route:
    origin: Station
    destination: Station
    direction_id: str
    direction: str
    origin_stop_id: str
    destination_stop_id: str
    low_confidence: list[str] = field(default_factory=list)


def route_between(
    origin_key: str,
    destination_key: str,
    stations: Sequence[Station] = CALTRAIN_STATIONS,
) -> _Route:
    origin = find_station(origin_key, stations)
    destination = find_station(destination_key, stations)
    if origin is None or destination is None:
        raise ResolutionError(f"Station not found: origin={origin_key!r} destination={destination_key!r}")
    if origin.id == destination.id:
        raise ResolutionError(f"Origin and destination are the same station: {origin.id}")

    # Station list runs north to south
    is_northbound = station_index(origin, stations) > station_index(destination, stations)
    direction_id = NORTHBOUND if is_northbound else SOUTHBOUND

    origin_map = stop_id(origin.code, direction_id)
    dest_map = stop_id(destination.code, direction_id)

    return _Route(
        origin=origin,
        destination=destination,
        direction_id=direction_id,
        direction="Northbound" if is_northbound else "Southbound",
        origin_stop_id=origin_map.stop_id,
        destination_stop_id=dest_map.stop_id,
        low_confidence=[m.station_code for m in (origin_map, dest_map) if m.low_confidence],
    )


def resolve_trains(
    snapshot: DatasetSnapshot,
    route: _Route,
    when: datetime,
    lookups: Sequence[DelayLookup],
    *,
    limit: int = DEFAULT_LIMIT,
    tz: tzinfo = TRANSIT_TZ,
) -> list[ResolvedTrain]:
    service_id = active_service(when, snapshot.calendars, snapshot.calendar_exceptions, tz)
    if service_id is None:
        raise ResolutionError(f"No active service found for {when.isoformat()}")

    service_date = service_day(when, tz).civil_date
    trips = snapshot.trips_for_service(service_id)
    logger.info("Active service %s on %s: %d trips", service_id, service_date.isoformat(), len(trips))

    candidates: list[Candidate] = []
    for trip in trips:
        if trip.direction_id != route.direction_id:
            continue

        origin_stop = snapshot.stop_time(trip.trip_id, route.origin_stop_id)
        dest_stop = snapshot.stop_time(trip.trip_id, route.destination_stop_id)
        if origin_stop is None or dest_stop is None:
            continue
        if origin_stop.stop_sequence >= dest_stop.stop_sequence:
            continue

        try:
            departure = materialize(origin_stop.departure_time, service_date, tz)
            arrival = materialize(dest_stop.arrival_time, service_date, tz)
        except ValueError as e:
            logger.warning("Trip %s skipped: %s", trip.trip_id, e)
            continue

        train_number = trip.trip_short_name or trip.trip_id
        candidates.append(
            Candidate(
                trip_id=trip.trip_id,
                train_number=train_number,
                direction=route.direction,
                scheduled_departure=departure,
                scheduled_arrival=arrival,
                stop_count=len(snapshot.stops_for_trip(trip.trip_id)),
                overlay=apply_lookups(trip.trip_id, train_number, departure, arrival, lookups),
            )
        )

    selected = select(candidates, when, limit)
    logger.info(
        "Found %d candidate trains %s -> %s, returning %d",
        len(candidates),
        route.origin.name,
        route.destination.name,
        len(selected),
    )

    return [
        ResolvedTrain(
            train_number=c.train_number,
            trip_id=c.trip_id,
            direction=c.direction,
            departure_time=c.scheduled_departure,
            arrival_time=c.scheduled_arrival,
            duration_minutes=duration_minutes(c.scheduled_departure, c.scheduled_arrival),
            type=classify(c.stop_count),
            status=c.overlay.status,
            delay_minutes=c.overlay.delay_minutes,
            actual_departure_time=c.overlay.actual_departure,
            actual_arrival_time=c.overlay.actual_arrival,
        )
        for c in selected
    ]


def get_scheduled_trains(
    store: DatasetStore,
    origin: str,
    destination: str,
    when: Optional[datetime] = None,
    *,
    trip_updates: Iterable[TripUpdate] = (),
    scraped_delays: Optional[Mapping[str, ScrapedDelay]] = None,
    limit: int = DEFAULT_LIMIT,
    stations: Sequence[Station] = CALTRAIN_STATIONS,
    tz: tzinfo = TRANSIT_TZ,
) -> DepartureBoard:
    """
    Next departures from `origin` to `destination` (station codes or ids).
    Never raises for "no trains": unrecoverable conditions give an empty
    board with `reason` set.
    """
    when = when or datetime.now(timezone.utc)
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)

    try:
        ready = store.ensure_fresh()
    except LoadError as e:
        logger.error("GTFS data not loaded: %s", e)
        return DepartureBoard(used_fallback_data=True, reason=REASON_NO_DATASET)

    snapshot = ready.snapshot
    board = DepartureBoard(
        dataset_source=snapshot.source,
        dataset_stale=ready.stale,
        used_fallback_data=ready.stale or snapshot.source != store.primary_source,
    )

    try:
        route = route_between(origin, destination, stations)
    except ResolutionError as e:
        logger.error("%s", e)
        return board.with_trains((), reason=REASON_BAD_STATION)

    feed = FeedDelayLookup(trip_updates)
    scraped = ScrapedDelayLookup(scraped_delays or {})
    board = board.with_trains(
        (),
        realtime_sources=tuple(lk.name for lk in (feed, scraped) if len(lk)),
        low_confidence_stops=tuple(route.low_confidence),
    )

    try:
        trains = resolve_trains(snapshot, route, when, [feed, scraped], limit=limit, tz=tz)
    except ResolutionError as e:
        logger.warning("%s", e)
        return board.with_trains((), reason=REASON_NO_SERVICE)

    return board.with_trains(trains)
