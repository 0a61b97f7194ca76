import logging
import re
import time
from typing import Optional

import httpx

from app.core.config import Settings

logger = logging.getLogger(__name__)

_API_KEY_RE = re.compile(r"(api_key=)([^&]+)")


def mask_api_key(url: str) -> str:
    def _mask(m: re.Match) -> str:
        token = m.group(2)
        if len(token) <= 6:
            return f"{m.group(1)}****"
        return f"{m.group(1)}****{token[-4:]}"

    return _API_KEY_RE.sub(_mask, url)


def configure_logging_if_needed(level: str = "INFO") -> None:
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


def log_request(request: httpx.Request) -> None:
    logger.debug("HTTP %s %s", request.method, mask_api_key(str(request.url)))


def make_client(cfg: Settings, *, transport: Optional[httpx.BaseTransport] = None) -> httpx.Client:
    timeout = httpx.Timeout(
        connect=cfg.connect_timeout,
        read=cfg.read_timeout,
        write=cfg.read_timeout,
        pool=cfg.connect_timeout,
    )
    return httpx.Client(
        timeout=timeout,
        follow_redirects=True,
        event_hooks={"request": [log_request]},
        transport=transport,
    )


def get_once(client: httpx.Client, url: str, params: Optional[dict] = None) -> httpx.Response:
    """Single GET attempt. Failures propagate; callers fall back instead of retrying."""
    t0 = time.perf_counter()
    r = client.get(url, params=params)
    elapsed = time.perf_counter() - t0

    if elapsed > 10:
        logger.info("GET %s completed in %.2fs status=%d (slow)", mask_api_key(str(r.url)), elapsed, r.status_code)
    else:
        logger.debug("GET %s completed in %.2fs status=%d", mask_api_key(str(r.url)), elapsed, r.status_code)

    if r.is_error:
        snippet = (r.text or "")[:300]
        logger.warning(
            "HTTP %d GET %s after %.2fs body_snippet=%r",
            r.status_code,
            mask_api_key(str(r.url)),
            elapsed,
            snippet,
        )
    r.raise_for_status()
    return r
