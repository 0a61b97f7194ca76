import io
import logging
import zipfile
import zlib
from typing import Optional

import httpx

from app.core.config import Settings
from app.core.http import get_once, make_client
from app.errors import LoadError
from app.gtfs.parser import OPTIONAL_TABLES, REQUIRED_TABLES
from app.gtfs.sources.base import BaseSource

logger = logging.getLogger(__name__)


def extract_tables(archive: bytes) -> dict[str, str]:
    """Pull the GTFS tables out of a zip bundle. Entries may sit in a sub-folder."""
    try:
        zf = zipfile.ZipFile(io.BytesIO(archive))
    except zipfile.BadZipFile as e:
        raise LoadError(f"GTFS archive could not be opened: {e}") from e

    with zf:
        by_basename = {name.rsplit("/", 1)[-1]: name for name in zf.namelist()}

        missing = [name for name in REQUIRED_TABLES if name not in by_basename]
        if missing:
            raise LoadError(f"Required GTFS files not found in zip: {', '.join(missing)}")

        tables: dict[str, str] = {}
        for name in (*REQUIRED_TABLES, *OPTIONAL_TABLES):
            if name in by_basename:
                try:
                    tables[name] = zf.read(by_basename[name]).decode("utf-8-sig")
                except (UnicodeDecodeError, zipfile.BadZipFile, zlib.error) as e:
                    raise LoadError(f"GTFS archive member {name} is unreadable: {e}") from e
    return tables


class RemoteArchiveSource(BaseSource):
    """GTFS static zip published by the operator's data vendor."""

    name = "remote"

    def __init__(self, cfg: Settings, *, transport: Optional[httpx.BaseTransport] = None):
        self.cfg = cfg
        self.transport = transport

    def fetch_tables(self) -> dict[str, str]:
        logger.info("Fetching GTFS static data from %s", self.cfg.static_url)
        try:
            with make_client(self.cfg, transport=self.transport) as client:
                r = get_once(client, self.cfg.static_url)
        except httpx.HTTPError as e:
            raise LoadError(f"Failed to fetch GTFS data: {e!r}") from e

        logger.info("GTFS archive downloaded size=%d bytes", len(r.content))
        return extract_tables(r.content)
