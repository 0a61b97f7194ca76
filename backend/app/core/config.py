import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

BACKEND_DIR = Path(__file__).resolve().parents[2]


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str]
    agency: str

    static_url: str
    api_base: str
    alerts_url: str
    local_dir: Path

    cache_hours: float
    timezone: str

    connect_timeout: float
    read_timeout: float

    result_limit: int
    log_level: str

    @property
    def remote_enabled(self) -> bool:
        return bool(self.api_key)


def load_config() -> Settings:
    load_dotenv(BACKEND_DIR / ".env")

    return Settings(
        api_key=os.getenv("TRANSIT_API_KEY") or None,
        agency=os.getenv("TRANSIT_AGENCY", "CT"),
        static_url=os.getenv(
            "GTFS_STATIC_URL",
            "https://data.trilliumtransit.com/gtfs/caltrain-ca-us/caltrain-ca-us.zip",
        ),
        api_base=os.getenv("TRANSIT_API_BASE", "http://api.511.org/transit"),
        alerts_url=os.getenv("CALTRAIN_ALERTS_URL", "https://www.caltrain.com/alerts"),
        local_dir=Path(os.getenv("GTFS_LOCAL_DIR", str(BACKEND_DIR / "data" / "gtfs"))),
        cache_hours=float(os.getenv("GTFS_CACHE_HOURS", "24")),
        timezone=os.getenv("TRANSIT_TIMEZONE", "America/Los_Angeles"),
        connect_timeout=float(os.getenv("HTTP_CONNECT_TIMEOUT_SECONDS", "10")),
        read_timeout=float(os.getenv("HTTP_READ_TIMEOUT_SECONDS", "30")),
        result_limit=int(os.getenv("RESULT_LIMIT", "5")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
