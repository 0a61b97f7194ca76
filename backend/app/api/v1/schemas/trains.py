from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from app.schedule.resolver import DepartureBoard, ResolvedTrain


class Train(BaseModel):
    train_number: str
    trip_id: str
    direction: Literal["Northbound", "Southbound"]

    departure_time: datetime = Field(..., description="Scheduled departure from origin (ISO, with offset)")
    arrival_time: datetime = Field(..., description="Scheduled arrival at destination (ISO, with offset)")
    duration_minutes: int
    type: Literal["Local", "Limited", "Express"]

    status: Literal["on-time", "delayed", "cancelled"] = "on-time"
    delay_minutes: int = 0
    actual_departure_time: Optional[datetime] = None
    actual_arrival_time: Optional[datetime] = None

    @classmethod
    def from_resolved(cls, t: ResolvedTrain) -> "Train":
        return cls(
            train_number=t.train_number,
            trip_id=t.trip_id,
            direction=t.direction,
            departure_time=t.departure_time,
            arrival_time=t.arrival_time,
            duration_minutes=t.duration_minutes,
            type=t.type,
            status=t.status,
            delay_minutes=t.delay_minutes,
            actual_departure_time=t.actual_departure_time,
            actual_arrival_time=t.actual_arrival_time,
        )


class TrainsResponse(BaseModel):
    trains: list[Train]

    used_fallback_data: bool
    is_synthetic: bool = Field(False, description="Placeholder schedule, not from the timetable")
    dataset_source: Optional[Literal["remote", "local"]] = None
    dataset_stale: bool = False
    realtime_sources: list[Literal["gtfs-rt", "scraped"]] = []
    low_confidence_stops: list[str] = []
    reason: Optional[str] = None

    @classmethod
    def from_board(cls, board: DepartureBoard) -> "TrainsResponse":
        return cls(
            trains=[Train.from_resolved(t) for t in board.trains],
            used_fallback_data=board.used_fallback_data,
            is_synthetic=board.is_synthetic,
            dataset_source=board.dataset_source,
            dataset_stale=board.dataset_stale,
            realtime_sources=list(board.realtime_sources),
            low_confidence_stops=list(board.low_confidence_stops),
            reason=board.reason,
        )


class Alert(BaseModel):
    id: str
    severity: Literal["info", "warning", "critical"]
    header_text: str
    description_text: str
    url: Optional[str] = None
