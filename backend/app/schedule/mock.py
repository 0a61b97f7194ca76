import logging
from datetime import datetime, timedelta, timezone
from typing import Sequence

from app.errors import ResolutionError
from app.schedule.resolver import ResolvedTrain, route_between
from app.schedule.selection import DEFAULT_LIMIT
from app.schedule.stations import CALTRAIN_STATIONS, Station, station_index

logger = logging.getLogger(__name__)

HEADWAY_MINUTES = 30
MINUTES_PER_HOP = 4
_PATTERN = ("Local", "Limited", "Local", "Express")


def mock_trains(
    origin: str,
    destination: str,
    when: datetime,
    *,
    limit: int = DEFAULT_LIMIT,
    stations: Sequence[Station] = CALTRAIN_STATIONS,
) -> list[ResolvedTrain]:
    """
    Placeholder departures on a fixed half-hourly pattern, used only when no
    timetable is available. Callers must flag the board as synthetic.
    """
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    try:
        route = route_between(origin, destination, stations)
    except ResolutionError as e:
        logger.warning("No placeholder schedule: %s", e)
        return []

    hops = abs(station_index(route.origin, stations) - station_index(route.destination, stations))
    base_number = 101 if route.direction == "Northbound" else 102

    first = when.replace(second=0, microsecond=0) + timedelta(minutes=HEADWAY_MINUTES - when.minute % HEADWAY_MINUTES)
    trains: list[ResolvedTrain] = []
    for i in range(limit):
        train_type = _PATTERN[i % len(_PATTERN)]
        per_hop = MINUTES_PER_HOP if train_type == "Local" else MINUTES_PER_HOP - 1
        duration = hops * per_hop
        departure = first + timedelta(minutes=i * HEADWAY_MINUTES)
        arrival = departure + timedelta(minutes=duration)
        number = str(base_number + 2 * i)
        trains.append(
            ResolvedTrain(
                train_number=number,
                trip_id=f"mock-{number}",
                direction=route.direction,
                departure_time=departure,
                arrival_time=arrival,
                duration_minutes=duration,
                type=train_type,
                actual_departure_time=departure,
                actual_arrival_time=arrival,
            )
        )
    return trains
