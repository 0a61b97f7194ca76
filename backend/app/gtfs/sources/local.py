import logging
from pathlib import Path

from app.errors import LoadError
from app.gtfs.parser import OPTIONAL_TABLES, REQUIRED_TABLES
from app.gtfs.sources.base import BaseSource

logger = logging.getLogger(__name__)


class LocalDirectorySource(BaseSource):
    """Bundled GTFS copy read from disk, used offline or when the remote fetch fails."""

    name = "local"

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    def _read(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise LoadError(f"Cannot read {path}: {e}") from e

    def fetch_tables(self) -> dict[str, str]:
        logger.info("Reading local GTFS files from %s", self.data_dir)
        tables: dict[str, str] = {}

        for name in REQUIRED_TABLES:
            tables[name] = self._read(self.data_dir / name)

        for name in OPTIONAL_TABLES:
            path = self.data_dir / name
            if path.exists():
                tables[name] = self._read(path)
            else:
                logger.debug("Optional GTFS file %s absent", path)

        logger.debug("Local GTFS file sizes: %s", {k: len(v) for k, v in tables.items()})
        return tables
