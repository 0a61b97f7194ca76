import math
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo

TRANSIT_TZ = ZoneInfo("America/Los_Angeles")


def parse_clock(value: str) -> tuple[int, int, int]:
    """
    Split a GTFS "HH:MM:SS" clock into ints. Hours may exceed 23
    (service running past midnight). Seconds are optional.
    """
    parts = (value or "").strip().split(":")
    if len(parts) not in (2, 3) or not all(p.strip().isdigit() for p in parts):
        raise ValueError(f"Bad GTFS time value: {value!r}")

    h, m = int(parts[0]), int(parts[1])
    s = int(parts[2]) if len(parts) == 3 else 0
    if m > 59 or s > 59:
        raise ValueError(f"Bad GTFS time value: {value!r}")
    return h, m, s


def local_date(when: datetime, tz: tzinfo = TRANSIT_TZ) -> date:
    """Civil date of an instant in the transit timezone. Naive values are taken as UTC."""
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return when.astimezone(tz).date()


def offset_for_date(d: date, tz: tzinfo = TRANSIT_TZ) -> timedelta:
    """
    UTC offset in force on a civil date, read at local midday so the
    overnight DST switch does not matter.
    """
    return datetime.combine(d, time(12), tzinfo=tz).utcoffset()


def materialize(clock: str, service_date: date, tz: tzinfo = TRANSIT_TZ) -> datetime:
    """
    Turn a GTFS clock on a service date into an aware instant.
    25:30:00 on D is 01:30 on D+1, using D+1's offset.
    """
    h, m, s = parse_clock(clock)
    day_offset, hour_of_day = divmod(h, 24)

    actual = service_date + timedelta(days=day_offset)
    offset = offset_for_date(actual, tz)

    return datetime(
        actual.year,
        actual.month,
        actual.day,
        hour_of_day,
        m,
        s,
        tzinfo=timezone(offset),
    )


def duration_minutes(start: datetime, end: datetime) -> int:
    # DST changing between the two endpoints shows up here as a +-60 skew
    return round_half_up((end - start).total_seconds() / 60.0)


def round_half_up(x: float) -> int:
    """Nearest integer, halves rounded up (-2.5 -> -2)."""
    return math.floor(x + 0.5)
