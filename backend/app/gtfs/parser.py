import csv
import io
import logging
from datetime import datetime, timezone
from typing import Optional

from app.errors import LoadError
from app.gtfs.types import Calendar, CalendarException, DatasetSnapshot, StopTime, Trip

logger = logging.getLogger(__name__)

STOP_TIMES = "stop_times.txt"
TRIPS = "trips.txt"
CALENDAR = "calendar.txt"
CALENDAR_DATES = "calendar_dates.txt"

REQUIRED_TABLES = (STOP_TIMES, TRIPS, CALENDAR)
OPTIONAL_TABLES = (CALENDAR_DATES,)


def parse_table(text: str) -> list[dict[str, str]]:
    """
    Parse a GTFS comma-separated table into row dicts keyed by header.
    Short rows are padded with "" instead of being rejected.
    """
    text = (text or "").lstrip("\ufeff").strip()
    if not text:
        return []

    reader = csv.reader(io.StringIO(text))
    try:
        headers = [h.strip() for h in next(reader)]
    except StopIteration:
        return []

    rows: list[dict[str, str]] = []
    for values in reader:
        if not values or all(not v.strip() for v in values):
            continue
        rows.append({h: (values[i].strip() if i < len(values) else "") for i, h in enumerate(headers)})
    return rows


def _stop_time(row: dict[str, str]) -> StopTime:
    raw_seq = row.get("stop_sequence", "")
    try:
        seq = int(raw_seq)
    except ValueError:
        raise LoadError(f"Malformed stop_times row trip_id={row.get('trip_id')!r} stop_sequence={raw_seq!r}")

    return StopTime(
        trip_id=row.get("trip_id", ""),
        arrival_time=row.get("arrival_time", ""),
        departure_time=row.get("departure_time", ""),
        stop_id=row.get("stop_id", ""),
        stop_sequence=seq,
    )


def _trip(row: dict[str, str]) -> Trip:
    return Trip(
        trip_id=row.get("trip_id", ""),
        route_id=row.get("route_id", ""),
        service_id=row.get("service_id", ""),
        trip_short_name=row.get("trip_short_name", ""),
        trip_headsign=row.get("trip_headsign", ""),
        direction_id=row.get("direction_id", ""),
    )


def _calendar(row: dict[str, str]) -> Calendar:
    return Calendar(
        service_id=row.get("service_id", ""),
        sunday=row.get("sunday", ""),
        monday=row.get("monday", ""),
        tuesday=row.get("tuesday", ""),
        wednesday=row.get("wednesday", ""),
        thursday=row.get("thursday", ""),
        friday=row.get("friday", ""),
        saturday=row.get("saturday", ""),
        start_date=row.get("start_date", ""),
        end_date=row.get("end_date", ""),
    )


def _calendar_exception(row: dict[str, str]) -> CalendarException:
    return CalendarException(
        service_id=row.get("service_id", ""),
        date=row.get("date", ""),
        exception_type=row.get("exception_type", ""),
    )


def build_snapshot(
    tables: dict[str, str],
    *,
    source: str,
    now: Optional[datetime] = None,
) -> DatasetSnapshot:
    """Build an immutable snapshot from raw table texts keyed by file name."""
    missing = [name for name in REQUIRED_TABLES if name not in tables]
    if missing:
        raise LoadError(f"Required GTFS files not found: {', '.join(missing)}")

    snapshot = DatasetSnapshot(
        stop_times=tuple(_stop_time(r) for r in parse_table(tables[STOP_TIMES])),
        trips=tuple(_trip(r) for r in parse_table(tables[TRIPS])),
        calendars=tuple(_calendar(r) for r in parse_table(tables[CALENDAR])),
        calendar_exceptions=tuple(
            _calendar_exception(r) for r in parse_table(tables.get(CALENDAR_DATES, ""))
        ),
        last_refreshed=now or datetime.now(timezone.utc),
        source=source,
    )
    logger.info("Parsed GTFS %s dataset: %s", source, snapshot.counts())
    return snapshot
