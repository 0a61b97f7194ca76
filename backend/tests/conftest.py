import io
import zipfile
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from app.core.config import Settings
from app.gtfs.parser import build_snapshot
from app.gtfs.sources.base import BaseSource
from app.gtfs.sources.local import LocalDirectorySource
from app.gtfs.store import DatasetStore

# Southbound platform ids SF -> San Jose Diridon, 22 stops
SB_STOPS = [
    "70012", "70022", "70032", "70042", "70052", "70062", "70082", "70092", "70102", "70112", "70122",
    "70132", "70142", "70162", "70172", "70192", "70202", "70212", "70222", "70232", "70242", "70262",
]

CALENDAR_TXT = (
    "service_id,monday,tuesday,wednesday,thursday,friday,saturday,sunday,start_date,end_date\n"
    "WKDY,1,1,1,1,1,0,0,20260101,20271231\n"
    "WKND,0,0,0,0,0,1,1,20260101,20271231\n"
)


def clock(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}:00"


def stop_rows(trip_id: str, stops: list[str], start: int, end: int) -> list[str]:
    """Rows for one trip spread evenly from `start` to `end` (minutes after midnight)."""
    step = (end - start) / (len(stops) - 1)
    rows = []
    for i, stop in enumerate(stops):
        t = clock(int(round(start + i * step)))
        rows.append(f"{trip_id},{t},{t},{stop},{i + 1}")
    return rows


def make_tables(trips: list[tuple], calendar_dates: str = "") -> dict[str, str]:
    """
    trips: (trip_id, short_name, service_id, direction_id, stops, start_min, end_min)
    """
    trip_lines = ["route_id,service_id,trip_id,trip_headsign,trip_short_name,direction_id"]
    st_lines = ["trip_id,arrival_time,departure_time,stop_id,stop_sequence"]
    for trip_id, short_name, service_id, direction_id, stops, start, end in trips:
        trip_lines.append(f"Local,{service_id},{trip_id},San Jose Diridon,{short_name},{direction_id}")
        st_lines.extend(stop_rows(trip_id, stops, start, end))

    tables = {
        "trips.txt": "\n".join(trip_lines) + "\n",
        "stop_times.txt": "\n".join(st_lines) + "\n",
        "calendar.txt": CALENDAR_TXT,
    }
    if calendar_dates:
        tables["calendar_dates.txt"] = calendar_dates
    return tables


def make_zip(tables: dict[str, str], prefix: str = "") -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, text in tables.items():
            zf.writestr(prefix + name, text)
    return buf.getvalue()


def write_tables(directory: Path, tables: dict[str, str]) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    for name, text in tables.items():
        (directory / name).write_text(text, encoding="utf-8")
    return directory


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        api_key=None,
        agency="CT",
        static_url="https://gtfs.example.test/caltrain.zip",
        api_base="https://api.example.test/transit",
        alerts_url="https://www.example.test/alerts",
        local_dir=tmp_path / "gtfs",
        cache_hours=24.0,
        timezone="America/Los_Angeles",
        connect_timeout=1.0,
        read_timeout=1.0,
        result_limit=5,
        log_level="DEBUG",
    )


@pytest.fixture
def weekday_tables() -> dict[str, str]:
    # One 22-stop southbound Local, SF 08:00 -> San Jose 08:45
    return make_tables([("T101", "101", "WKDY", "1", SB_STOPS, 8 * 60, 8 * 60 + 45)])


@pytest.fixture
def store_for():
    """Build a store already holding a fresh snapshot of the given tables."""

    def _build(tables: dict[str, str]) -> DatasetStore:
        snap = build_snapshot(tables, source="local", now=datetime.now(timezone.utc))
        return DatasetStore([LocalDirectorySource(Path("unused"))], snapshot=snap)

    return _build


def fake_source(name: str, tables=None, error=None) -> BaseSource:
    source = MagicMock(spec=BaseSource)
    source.name = name
    if error is not None:
        source.fetch_tables.side_effect = error
    else:
        source.fetch_tables.return_value = tables
    return source
