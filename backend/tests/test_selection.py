from datetime import datetime, timedelta, timezone

from app.realtime.overlay import OverlayResult
from app.schedule.selection import Candidate, classify, select

QUERY = datetime(2026, 10, 20, 15, 0, tzinfo=timezone.utc)


def candidate(number: str, dep_offset: int, ride: int = 45, delay: int = 0) -> Candidate:
    dep = QUERY + timedelta(minutes=dep_offset)
    arr = dep + timedelta(minutes=ride)
    shift = timedelta(minutes=delay)
    return Candidate(
        trip_id=f"T{number}",
        train_number=number,
        direction="Southbound",
        scheduled_departure=dep,
        scheduled_arrival=arr,
        stop_count=22,
        overlay=OverlayResult(
            actual_departure=dep + shift,
            actual_arrival=arr + shift,
            has_delay=delay != 0,
            delay_minutes=delay,
            status="delayed" if delay else "on-time",
            source="gtfs-rt" if delay else None,
        ),
    )


def test_classify_boundaries():
    assert classify(22) == "Local"
    assert classify(20) == "Local"
    assert classify(19) == "Limited"
    assert classify(13) == "Limited"
    assert classify(12) == "Express"
    assert classify(2) == "Express"


def test_departed_train_without_delay_is_dropped():
    assert select([candidate("101", -5)], QUERY) == []


def test_departed_train_with_delay_is_kept():
    """Scheduled 5 min ago, running 10 min late: still catchable."""
    kept = select([candidate("101", -5, delay=10)], QUERY)
    assert [c.train_number for c in kept] == ["101"]


def test_delayed_train_already_arrived_is_dropped():
    assert select([candidate("101", -60, ride=30, delay=10)], QUERY) == []


def test_train_departing_exactly_now_is_kept():
    assert len(select([candidate("101", 0)], QUERY)) == 1


def test_sorted_by_scheduled_departure_and_limited():
    trains = [candidate(str(100 + i), offset) for i, offset in enumerate([90, 10, 70, 30, 50, 110, 20])]
    picked = select(trains, QUERY, limit=5)
    assert [c.train_number for c in picked] == ["101", "106", "103", "104", "102"]


def test_sort_ignores_delay():
    late = candidate("101", 5, delay=20)
    on_time = candidate("103", 10)
    assert [c.train_number for c in select([on_time, late], QUERY)] == ["101", "103"]
