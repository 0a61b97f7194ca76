from functools import lru_cache

from app.core.config import Settings, load_config
from app.gtfs.store import DatasetStore


@lru_cache
def get_settings() -> Settings:
    return load_config()


@lru_cache
def get_store() -> DatasetStore:
    # One store per process; FastAPI dependency overrides swap it in tests
    return DatasetStore.from_settings(get_settings())
