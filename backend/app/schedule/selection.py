from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Literal

from app.realtime.overlay import OverlayResult

TrainType = Literal["Local", "Limited", "Express"]

DEFAULT_LIMIT = 5


def classify(stop_count: int) -> TrainType:
    """Stop-density heuristic: 20+ stops Local, 13-19 Limited, fewer Express."""
    if stop_count >= 20:
        return "Local"
    if stop_count >= 13:
        return "Limited"
    return "Express"


@dataclass(frozen=True)
class Candidate:
    trip_id: str
    train_number: str
    direction: str
    scheduled_departure: datetime
    scheduled_arrival: datetime
    stop_count: int
    overlay: OverlayResult


def is_relevant(c: Candidate, query: datetime) -> bool:
    """
    Drop trains that already arrived. Trains that already left the origin
    stay only when delayed, so en-route late trains remain visible.
    """
    if c.overlay.actual_arrival < query:
        return False
    if c.overlay.actual_departure < query:
        return c.overlay.has_delay
    return True


def select(candidates: Iterable[Candidate], query: datetime, limit: int = DEFAULT_LIMIT) -> list[Candidate]:
    # Ordered on the scheduled time so rows do not jump around as delays change
    kept = [c for c in candidates if is_relevant(c, query)]
    kept.sort(key=lambda c: c.scheduled_departure)
    return kept[:limit]
