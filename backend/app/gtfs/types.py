from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

WEEKDAY_FIELDS = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")

EXCEPTION_ADDED = "1"
EXCEPTION_REMOVED = "2"


@dataclass(frozen=True)
class StopTime:
    trip_id: str
    arrival_time: str                # "HH:MM:SS", hour may be >= 24
    departure_time: str
    stop_id: str
    stop_sequence: int


@dataclass(frozen=True)
class Trip:
    trip_id: str
    route_id: str
    service_id: str
    trip_short_name: str
    trip_headsign: str
    direction_id: str                # "0" northbound, "1" southbound


@dataclass(frozen=True)
class Calendar:
    service_id: str
    sunday: str
    monday: str
    tuesday: str
    wednesday: str
    thursday: str
    friday: str
    saturday: str
    start_date: str                  # YYYYMMDD, inclusive
    end_date: str                    # YYYYMMDD, inclusive

    def runs_on(self, day_of_week: int) -> bool:
        """day_of_week: 0=Sunday..6=Saturday"""
        return getattr(self, WEEKDAY_FIELDS[day_of_week]) == "1"


@dataclass(frozen=True)
class CalendarException:
    service_id: str
    date: str                        # YYYYMMDD
    exception_type: str              # "1" added, "2" removed


@dataclass(frozen=True)
class DatasetSnapshot:
    stop_times: tuple[StopTime, ...]
    trips: tuple[Trip, ...]
    calendars: tuple[Calendar, ...]
    calendar_exceptions: tuple[CalendarException, ...]
    last_refreshed: datetime
    source: str                      # "remote" | "local"

    stop_times_by_trip: dict[str, tuple[StopTime, ...]] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self):
        by_trip: dict[str, list[StopTime]] = {}
        for st in self.stop_times:
            by_trip.setdefault(st.trip_id, []).append(st)
        index = {
            trip_id: tuple(sorted(rows, key=lambda st: st.stop_sequence))
            for trip_id, rows in by_trip.items()
        }
        object.__setattr__(self, "stop_times_by_trip", index)

    def stops_for_trip(self, trip_id: str) -> tuple[StopTime, ...]:
        return self.stop_times_by_trip.get(trip_id, ())

    def stop_time(self, trip_id: str, stop_id: str) -> Optional[StopTime]:
        return next((st for st in self.stops_for_trip(trip_id) if st.stop_id == stop_id), None)

    def trips_for_service(self, service_id: str) -> list[Trip]:
        return [t for t in self.trips if t.service_id == service_id]

    def counts(self) -> dict:
        return {
            "stop_times": len(self.stop_times),
            "trips": len(self.trips),
            "calendar": len(self.calendars),
            "calendar_dates": len(self.calendar_exceptions),
        }


@dataclass(frozen=True)
class DatasetReady:
    snapshot: DatasetSnapshot
    stale: bool                      # True when the last reload failed and an older snapshot is served
