from dataclasses import dataclass, field
from typing import Literal, Optional

DelayStatus = Literal["on-time", "delayed", "cancelled"]

CANCELLED_RELATIONSHIPS = {"SKIPPED", "CANCELED"}


@dataclass(frozen=True)
class StopTimeEvent:
    delay: Optional[int]             # seconds; None when the feed omitted it
    time: Optional[int]              # unix timestamp


@dataclass(frozen=True)
class StopTimeUpdate:
    stop_id: str
    stop_sequence: int
    arrival: Optional[StopTimeEvent] = None
    departure: Optional[StopTimeEvent] = None
    schedule_relationship: Optional[str] = None   # "SCHEDULED" | "SKIPPED" | "NO_DATA" | ...

    @property
    def is_cancelled(self) -> bool:
        return self.schedule_relationship in CANCELLED_RELATIONSHIPS

    def delay_seconds(self) -> Optional[int]:
        """Departure delay, else arrival delay. A zero departure delay falls through to arrival."""
        dep = self.departure.delay if self.departure else None
        arr = self.arrival.delay if self.arrival else None
        if dep:
            return dep
        if arr:
            return arr
        if dep is None and arr is None:
            return None
        return 0


@dataclass(frozen=True)
class TripUpdate:
    trip_id: str
    route_id: str = ""
    start_date: str = ""
    start_time: str = ""
    stop_time_updates: tuple[StopTimeUpdate, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RealtimeDelay:
    delay_minutes: int
    status: DelayStatus


@dataclass(frozen=True)
class ScrapedDelay:
    train_number: str
    delay_minutes: int


@dataclass(frozen=True)
class ServiceAlert:
    id: str
    severity: Literal["info", "warning", "critical"]
    header_text: str
    description_text: str
    url: Optional[str] = None
