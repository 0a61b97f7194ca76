from __future__ import annotations

from datetime import datetime
from typing import Optional

import pytz
from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.v1.schemas.trains import Alert, TrainsResponse
from app.core.config import Settings
from app.core.deps import get_settings, get_store
from app.gtfs.store import DatasetStore
from app.realtime.alerts import fetch_service_alerts
from app.schedule.board import build_departure_board

router = APIRouter(prefix="/v1", tags=["trains"])


def parse_at(value: Optional[str], tz_name: str) -> Optional[datetime]:
    """ISO datetime; a value without offset is read as operator-local wall time."""
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=400, detail="at must be an ISO datetime")
    if dt.tzinfo is None:
        dt = pytz.timezone(tz_name).localize(dt)
    return dt


@router.get("/trains", response_model=TrainsResponse)
def get_trains(
    origin: str = Query(..., min_length=1, description="Station code or id, e.g. SF"),
    destination: str = Query(..., min_length=1, description="Station code or id, e.g. PA"),
    at: Optional[str] = Query(None, description="ISO datetime; defaults to now"),
    store: DatasetStore = Depends(get_store),
    cfg: Settings = Depends(get_settings),
):
    when = parse_at(at, cfg.timezone)
    board = build_departure_board(store, cfg, origin, destination, when)
    return TrainsResponse.from_board(board)


@router.get("/alerts", response_model=list[Alert])
def get_alerts(cfg: Settings = Depends(get_settings)):
    return [
        Alert(
            id=a.id,
            severity=a.severity,
            header_text=a.header_text,
            description_text=a.description_text,
            url=a.url,
        )
        for a in fetch_service_alerts(cfg)
    ]
