from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.routes.health import router as health_router
from app.api.v1.routes.trains import router as trains_router
from app.core.deps import get_settings
from app.core.http import configure_logging_if_needed

configure_logging_if_needed(get_settings().log_level)

app = FastAPI(title="Caltrain Departures API")

# Read-only public data; any origin may call it
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(health_router, prefix="/v1")
app.include_router(trains_router)
