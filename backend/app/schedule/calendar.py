import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo
from typing import Iterable, Optional, Union

from app.gtfs.types import EXCEPTION_ADDED, EXCEPTION_REMOVED, Calendar, CalendarException
from app.schedule.time import TRANSIT_TZ

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceDay:
    day_of_week: int                 # 0=Sunday..6=Saturday, like GTFS/JS getDay()
    date_str: str                    # YYYYMMDD
    civil_date: date


def service_day(when: Union[datetime, date], tz: tzinfo = TRANSIT_TZ) -> ServiceDay:
    """
    Normalize a query instant to the operator's civil day. The instant is
    usually UTC based while GTFS calendars are written in local time, so
    late-evening UTC queries must land on the previous local day.
    """
    if isinstance(when, datetime):
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        d = when.astimezone(tz).date()
    else:
        d = when

    # Python weekday: Mon=0..Sun=6
    return ServiceDay(day_of_week=(d.weekday() + 1) % 7, date_str=d.strftime("%Y%m%d"), civil_date=d)


def active_service(
    when: Union[datetime, date],
    calendars: Iterable[Calendar],
    exceptions: Iterable[CalendarException],
    tz: tzinfo = TRANSIT_TZ,
) -> Optional[str]:
    """
    Pick the single service_id running on `when`.

    An "added" exception for the date wins outright. Otherwise the first
    calendar (dataset order) whose date range and weekday flag match and which
    is not removed for that date. Ties are settled by that order only.
    """
    day = service_day(when, tz)
    exceptions = list(exceptions)

    added = next(
        (cd for cd in exceptions if cd.date == day.date_str and cd.exception_type == EXCEPTION_ADDED),
        None,
    )
    if added is not None:
        logger.debug("Service %s added by exception on %s", added.service_id, day.date_str)
        return added.service_id

    removed = {
        cd.service_id
        for cd in exceptions
        if cd.date == day.date_str and cd.exception_type == EXCEPTION_REMOVED
    }

    current = int(day.date_str)
    for cal in calendars:
        try:
            start, end = int(cal.start_date), int(cal.end_date)
        except ValueError:
            logger.warning("Calendar %s has bad date range %r..%r", cal.service_id, cal.start_date, cal.end_date)
            continue

        if current < start or current > end:
            continue
        if cal.service_id in removed:
            continue
        if cal.runs_on(day.day_of_week):
            return cal.service_id

    return None
