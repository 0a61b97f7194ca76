"""Tests for merging live delay sources onto scheduled times."""

from datetime import datetime, timedelta, timezone

from app.realtime.overlay import (
    FeedDelayLookup,
    ScrapedDelayLookup,
    apply_lookups,
    calculate_trip_delay,
    overlay,
    stop_delay,
    trip_delay,
)
from app.realtime.types import ScrapedDelay, StopTimeEvent, StopTimeUpdate, TripUpdate

DEP = datetime(2026, 10, 20, 15, 0, tzinfo=timezone.utc)
ARR = DEP + timedelta(minutes=45)


def stu(stop_id, seq, dep_delay=None, arr_delay=None, relationship=None):
    return StopTimeUpdate(
        stop_id=stop_id,
        stop_sequence=seq,
        departure=StopTimeEvent(delay=dep_delay, time=None) if dep_delay is not None else None,
        arrival=StopTimeEvent(delay=arr_delay, time=None) if arr_delay is not None else None,
        schedule_relationship=relationship,
    )


def update(trip_id, *stus):
    return TripUpdate(trip_id=trip_id, stop_time_updates=tuple(stus))


def test_feed_delay_applied_to_both_endpoints():
    updates = [update("T1", stu("70012", 1, dep_delay=13 * 60))]
    res = overlay("T1", "101", DEP, ARR, updates, {})
    assert res.actual_departure == DEP + timedelta(minutes=13)
    assert res.actual_arrival == ARR + timedelta(minutes=13)
    assert res.has_delay
    assert res.delay_minutes == 13
    assert res.status == "delayed"
    assert res.source == "gtfs-rt"


def test_zero_feed_delay_falls_back_to_scraped():
    updates = [update("T1", stu("70012", 1, dep_delay=0))]
    scraped = {"101": ScrapedDelay("101", 5)}
    res = overlay("T1", "101", DEP, ARR, updates, scraped)
    assert res.actual_departure == DEP + timedelta(minutes=5)
    assert res.delay_minutes == 5
    assert res.source == "scraped"


def test_no_feed_match_uses_scraped_by_train_number():
    updates = [update("OTHER", stu("70012", 1, dep_delay=600))]
    res = overlay("T1", "101", DEP, ARR, updates, {"101": ScrapedDelay("101", 7)})
    assert res.delay_minutes == 7


def test_feed_wins_over_scraped():
    updates = [update("T1", stu("70012", 1, dep_delay=180))]
    res = overlay("T1", "101", DEP, ARR, updates, {"101": ScrapedDelay("101", 20)})
    assert res.delay_minutes == 3
    assert res.source == "gtfs-rt"


def test_no_signal_is_on_time():
    res = overlay("T1", "101", DEP, ARR, [], None)
    assert not res.has_delay
    assert res.status == "on-time"
    assert res.actual_departure == DEP
    assert res.source is None


def test_max_magnitude_delay_along_trip():
    u = update(
        "T1",
        stu("a", 1, dep_delay=60),
        stu("b", 2, arr_delay=-540),
        stu("c", 3, dep_delay=300),
    )
    assert calculate_trip_delay(u).delay_minutes == -9


def test_departure_zero_falls_through_to_arrival():
    u = update("T1", stu("a", 1, dep_delay=0, arr_delay=240))
    assert calculate_trip_delay(u).delay_minutes == 4


def test_delay_rounded_to_nearest_minute():
    assert calculate_trip_delay(update("T1", stu("a", 1, dep_delay=89))).delay_minutes == 1
    assert calculate_trip_delay(update("T1", stu("a", 1, dep_delay=90))).delay_minutes == 2


def test_skipped_stop_cancels_trip_regardless_of_delays():
    updates = [
        update(
            "T1",
            stu("a", 1, dep_delay=900),
            stu("b", 2, relationship="SKIPPED"),
            stu("c", 3, dep_delay=1200),
        )
    ]
    res = overlay("T1", "101", DEP, ARR, updates, {"101": ScrapedDelay("101", 5)})
    assert res.status == "cancelled"
    assert not res.has_delay
    assert res.actual_departure == DEP


def test_stop_without_delay_fields_is_no_signal():
    u = update("T1", stu("a", 1), stu("b", 2, dep_delay=120))
    assert calculate_trip_delay(u).delay_minutes == 2


def test_update_without_stops_gives_nothing():
    assert calculate_trip_delay(update("T1")) is None


def test_trip_delay_train_number_fallback():
    updates = [update("CT-507", stu("a", 1, dep_delay=300))]
    assert trip_delay(updates, "T1") is None
    assert trip_delay(updates, "T1", train_number="507").delay_minutes == 5


def test_stop_delay_for_specific_stop():
    updates = [
        update("T1", stu("70012", 1, dep_delay=60), stu("70022", 2, dep_delay=420)),
        update("T2", stu("70022", 2, dep_delay=60)),
    ]
    assert stop_delay(updates, "70022", trip_id="T1").delay_minutes == 7
    assert stop_delay(updates, "70022").delay_minutes == 7
    assert stop_delay(updates, "99999") is None


def test_lookups_are_pluggable():
    """A lookup list without the feed still resolves scraped delays."""
    lookups = [ScrapedDelayLookup({"101": ScrapedDelay("101", 13)})]
    res = apply_lookups("T1", "101", DEP, ARR, lookups)
    assert res.actual_arrival == ARR + timedelta(minutes=13)


def test_feed_lookup_first_update_per_trip_wins():
    lookup = FeedDelayLookup([update("T1", stu("a", 1, dep_delay=60)), update("T1", stu("a", 1, dep_delay=600))])
    assert len(lookup) == 1
    assert lookup.lookup("T1", "101").delay_minutes == 1
