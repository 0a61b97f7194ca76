import html
import logging
import re
from typing import Optional

import httpx

from app.core.config import Settings
from app.core.http import get_once, make_client
from app.realtime.types import ScrapedDelay

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]+>")
_SPACE_RE = re.compile(r"\s+")

# "Train 169 is running 13 min late", "#514 - 7 minutes behind", "Train 221: 20 min delay"
_DELAY_RE = re.compile(
    r"(?:\btrain\s*(?:no\.?|number)?\s*#?|#)\s*(?P<number>\d{3,4})\b"
    r"[^.;\n]{0,60}?\b(?P<minutes>\d{1,3})\s*(?:min|mins|minutes)\b\.?\s*(?:late|behind|delay(?:ed)?)",
    re.IGNORECASE,
)


def _plain_text(payload: str) -> str:
    text = _TAG_RE.sub(" ", payload or "")
    return _SPACE_RE.sub(" ", html.unescape(text))


def parse_scraped_delays(payload: str) -> dict[str, ScrapedDelay]:
    """
    Extract per-train delays from an operator alerts page (HTML or plain text).
    Keyed by public train number. If a train is mentioned twice the larger delay wins.
    """
    out: dict[str, ScrapedDelay] = {}
    for m in _DELAY_RE.finditer(_plain_text(payload)):
        number = m.group("number")
        minutes = int(m.group("minutes"))
        prev = out.get(number)
        if prev is None or minutes > prev.delay_minutes:
            out[number] = ScrapedDelay(train_number=number, delay_minutes=minutes)

    logger.debug("Scraped delays for %d trains", len(out))
    return out


def fetch_scraped_delays(
    cfg: Settings, *, transport: Optional[httpx.BaseTransport] = None
) -> dict[str, ScrapedDelay]:
    try:
        with make_client(cfg, transport=transport) as client:
            r = get_once(client, cfg.alerts_url)
    except httpx.HTTPError as e:
        logger.error("Error fetching operator alerts page: %r", e)
        return {}

    delays = parse_scraped_delays(r.text)
    logger.info("Operator alerts page lists %d delayed trains", len(delays))
    return delays
