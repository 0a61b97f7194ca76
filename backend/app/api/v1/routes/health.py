from fastapi import APIRouter, Depends

from app.core.deps import get_store
from app.gtfs.store import DatasetStore

router = APIRouter(tags=["health"])


@router.get("/health")
def health(store: DatasetStore = Depends(get_store)):
    return {"status": "ok", "dataset": store.status()}
