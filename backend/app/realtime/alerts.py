import json
import logging
import uuid
from typing import Any, Optional

import httpx

from app.core.config import Settings
from app.core.http import get_once, make_client, mask_api_key
from app.realtime.types import ServiceAlert

logger = logging.getLogger(__name__)


def as_list(x):
    if x is None:
        return []
    return x if isinstance(x, list) else [x]


def map_severity(severity: Optional[str]) -> str:
    if not severity:
        return "info"
    sev = severity.lower()
    if "severe" in sev or "critical" in sev:
        return "critical"
    if "warning" in sev or "moderate" in sev:
        return "warning"
    return "info"


def _first_text(value: Any) -> Optional[str]:
    # SIRI text nodes come through as [{"_": "..."}] or a bare string
    for item in as_list(value):
        if isinstance(item, dict) and item.get("_"):
            return item["_"]
        if isinstance(item, str) and item:
            return item
    return None


def parse_service_alerts(data: dict) -> list[ServiceAlert]:
    """Parse a 511.org SIRI situation-exchange JSON document."""
    delivery = (data or {}).get("ServiceDelivery", {}) or {}
    situations = (
        ((delivery.get("SituationExchangeDelivery") or {}).get("Situations") or {}).get("PtSituationElement")
    )

    alerts: list[ServiceAlert] = []
    for situation in as_list(situations):
        links = as_list(((situation.get("InfoLinks") or {}).get("InfoLink")))
        url = links[0].get("Uri") if links and isinstance(links[0], dict) else None
        alerts.append(
            ServiceAlert(
                id=situation.get("SituationNumber") or uuid.uuid4().hex,
                severity=map_severity(situation.get("Severity")),
                header_text=_first_text(situation.get("Summary")) or "Service Alert",
                description_text=_first_text(situation.get("Description")) or "",
                url=url or None,
            )
        )
    return alerts


def fetch_service_alerts(
    cfg: Settings, *, transport: Optional[httpx.BaseTransport] = None
) -> list[ServiceAlert]:
    if not cfg.api_key:
        logger.warning("TRANSIT_API_KEY not configured")
        return []

    url = f"{cfg.api_base}/servicealerts"
    try:
        with make_client(cfg, transport=transport) as client:
            r = get_once(client, url, params={"api_key": cfg.api_key, "agency": cfg.agency, "format": "json"})
        # 511.org prefixes its JSON with a UTF-8 BOM
        alerts = parse_service_alerts(json.loads(r.content.decode("utf-8-sig")))
    except (httpx.HTTPError, ValueError) as e:
        logger.error("Error fetching service alerts: %s", mask_api_key(repr(e)))
        return []

    logger.info("Fetched %d service alerts", len(alerts))
    return alerts
