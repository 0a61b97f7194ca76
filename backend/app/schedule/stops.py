import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

NORTHBOUND = "0"
SOUTHBOUND = "1"

# Public station code -> GTFS stop_id base; platform suffix 1 = NB, 2 = SB
STOP_ID_BASES: dict[str, str] = {
    "SF": "7001",
    "22ND": "7002",
    "BAYSHORE": "7003",
    "SSF": "7004",
    "SB": "7005",
    "MB": "7006",
    "MILLBRAE": "7006",
    "BURLINGAME": "7008",
    "SM": "7009",
    "HAYWARD": "7010",
    "HILLSDALE": "7011",
    "BELMONT": "7012",
    "SC": "7013",
    "SAN CARLOS": "7013",
    "RW": "7014",
    "REDWOOD": "7014",
    "MP": "7016",
    "MENLO": "7016",
    "PA": "7017",
    "PALO ALTO": "7017",
    "STANFORD": "253774",
    "CALAVEUE": "7019",
    "CALIFORNIA": "7019",
    "SAN ANTONIO": "7020",
    "MV": "7021",
    "MOUNTAIN VIEW": "7021",
    "SUNNYVALE": "7022",
    "LAWRENCE": "7023",
    "SANTACLARA": "7024",
    "SANTA CLARA": "7024",
    "COLLEGEPARK": "7025",
    "COLLEGE PARK": "7025",
    "SJ": "7026",
    "DIRIDON": "7026",
    "TAMIEN": "7027",
    "CAPITOL": "7028",
    "BH": "7029",
    "BLOSSOM HILL": "7029",
    "MH": "7030",
    "MORGAN HILL": "7030",
    "SAN MARTIN": "7031",
    "GILROY": "7032",
}

# Stanford (game-day platform) does not follow the 70xxN pattern
SPECIAL_STOP_IDS: dict[str, tuple[str, str]] = {
    "253774": ("2537740", "2537744"),
}


@dataclass(frozen=True)
class StopMapping:
    station_code: str
    stop_id: str
    low_confidence: bool             # True when the id was synthesized for an unmapped code


def direction_suffix(direction_id: str) -> str:
    return "1" if direction_id == NORTHBOUND else "2"


def stop_id(station_code: str, direction_id: str) -> StopMapping:
    base = STOP_ID_BASES.get(station_code.upper())

    if base is None:
        logger.warning("No GTFS mapping found for station code: %s", station_code)
        return StopMapping(
            station_code=station_code,
            stop_id=f"{station_code}{direction_suffix(direction_id)}",
            low_confidence=True,
        )

    if base in SPECIAL_STOP_IDS:
        nb, sb = SPECIAL_STOP_IDS[base]
        return StopMapping(station_code, nb if direction_id == NORTHBOUND else sb, False)

    return StopMapping(station_code, f"{base}{direction_suffix(direction_id)}", False)
