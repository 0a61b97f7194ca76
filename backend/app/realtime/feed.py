import logging
from typing import Optional

import httpx
from google.protobuf.message import DecodeError
from google.transit import gtfs_realtime_pb2

from app.core.config import Settings
from app.core.http import get_once, make_client, mask_api_key
from app.errors import OverlayError
from app.realtime.types import StopTimeEvent, StopTimeUpdate, TripUpdate

logger = logging.getLogger(__name__)

_RELATIONSHIP = gtfs_realtime_pb2.TripUpdate.StopTimeUpdate.ScheduleRelationship


def _event(msg) -> StopTimeEvent:
    return StopTimeEvent(
        delay=msg.delay if msg.HasField("delay") else None,
        time=msg.time if msg.HasField("time") else None,
    )


def decode_trip_updates(payload: bytes) -> list[TripUpdate]:
    """Decode a GTFS-Realtime FeedMessage into trip updates; other entity kinds are ignored."""
    feed = gtfs_realtime_pb2.FeedMessage()
    try:
        feed.ParseFromString(payload)
    except DecodeError as e:
        raise OverlayError(f"Malformed GTFS-Realtime payload: {e}") from e

    updates: list[TripUpdate] = []
    stop_time_update_count = 0

    for entity in feed.entity:
        if not entity.HasField("trip_update"):
            continue
        tu = entity.trip_update
        trip = tu.trip

        stus: list[StopTimeUpdate] = []
        for stu in tu.stop_time_update:
            stop_time_update_count += 1
            relationship = (
                _RELATIONSHIP.Name(stu.schedule_relationship)
                if stu.HasField("schedule_relationship")
                else None
            )
            stus.append(
                StopTimeUpdate(
                    stop_id=stu.stop_id,
                    stop_sequence=stu.stop_sequence,
                    arrival=_event(stu.arrival) if stu.HasField("arrival") else None,
                    departure=_event(stu.departure) if stu.HasField("departure") else None,
                    schedule_relationship=relationship,
                )
            )

        updates.append(
            TripUpdate(
                trip_id=trip.trip_id,
                route_id=trip.route_id,
                start_date=trip.start_date,
                start_time=trip.start_time,
                stop_time_updates=tuple(stus),
            )
        )

    logger.debug(
        "Decoded GTFS-Realtime feed: entities=%d trip_updates=%d stop_time_updates=%d",
        len(feed.entity),
        len(updates),
        stop_time_update_count,
    )
    return updates


def fetch_trip_updates(cfg: Settings, *, transport: Optional[httpx.BaseTransport] = None) -> list[TripUpdate]:
    """Fetch and decode live trip updates. Any failure yields an empty list."""
    if not cfg.api_key:
        logger.warning("TRANSIT_API_KEY not configured")
        return []

    url = f"{cfg.api_base}/tripupdates"
    try:
        with make_client(cfg, transport=transport) as client:
            r = get_once(client, url, params={"api_key": cfg.api_key, "agency": cfg.agency})
        updates = decode_trip_updates(r.content)
    except (httpx.HTTPError, OverlayError) as e:
        logger.error("Error fetching trip updates: %s", mask_api_key(repr(e)))
        return []

    logger.info("Fetched %d trip updates", len(updates))
    return updates
