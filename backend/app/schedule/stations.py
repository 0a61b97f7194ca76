from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass(frozen=True)
class Station:
    id: str
    code: str
    name: str


# Ordered north to south; the index drives the travel direction.
CALTRAIN_STATIONS: tuple[Station, ...] = (
    Station("sf", "SF", "San Francisco"),
    Station("22nd", "22ND", "22nd Street"),
    Station("bayshore", "BAYSHORE", "Bayshore"),
    Station("ssf", "SSF", "South San Francisco"),
    Station("sb", "SB", "San Bruno"),
    Station("millbrae", "MB", "Millbrae"),
    Station("burlingame", "BURLINGAME", "Burlingame"),
    Station("sm", "SM", "San Mateo"),
    Station("hayward-park", "HAYWARD", "Hayward Park"),
    Station("hillsdale", "HILLSDALE", "Hillsdale"),
    Station("belmont", "BELMONT", "Belmont"),
    Station("sc", "SC", "San Carlos"),
    Station("rw", "RW", "Redwood City"),
    Station("mp", "MP", "Menlo Park"),
    Station("pa", "PA", "Palo Alto"),
    Station("stanford", "STANFORD", "Stanford"),
    Station("california-ave", "CALIFORNIA", "California Avenue"),
    Station("san-antonio", "SAN ANTONIO", "San Antonio"),
    Station("mv", "MV", "Mountain View"),
    Station("sunnyvale", "SUNNYVALE", "Sunnyvale"),
    Station("lawrence", "LAWRENCE", "Lawrence"),
    Station("santa-clara", "SANTACLARA", "Santa Clara"),
    Station("college-park", "COLLEGEPARK", "College Park"),
    Station("sj", "SJ", "San Jose Diridon"),
    Station("tamien", "TAMIEN", "Tamien"),
    Station("capitol", "CAPITOL", "Capitol"),
    Station("bh", "BH", "Blossom Hill"),
    Station("mh", "MH", "Morgan Hill"),
    Station("san-martin", "SAN MARTIN", "San Martin"),
    Station("gilroy", "GILROY", "Gilroy"),
)


def find_station(key: str, stations: Sequence[Station] = CALTRAIN_STATIONS) -> Optional[Station]:
    """Look a station up by id or public code, case-insensitively."""
    k = (key or "").strip().lower()
    return next((s for s in stations if s.id.lower() == k or s.code.lower() == k), None)


def station_index(station: Station, stations: Sequence[Station] = CALTRAIN_STATIONS) -> int:
    return next(i for i, s in enumerate(stations) if s.id == station.id)
