# app/services/gov_alerts.py
"""
Environment Canada regional warning feed (RSS).

The feed is fixed per region and is not queried by geography, so every alert
is tagged with the coordinate of the refresh that fetched it.
"""
from __future__ import annotations

import logging
import uuid
import xml.etree.ElementTree as ET
from typing import List, Optional

import httpx

from app.core.contracts import Alert, AlertCategory, Coordinate
from app.core.errors import DecodeFailure, NetworkFailure
from app.core.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

SOURCE = "Environment Canada"


# ══════════════════════════════════════════════════════════════
# Classification
# ══════════════════════════════════════════════════════════════

def classify_title(title: str) -> AlertCategory:
    t = (title or "").lower()
    if "thunder" in t:
        return "thunder"
    if "fire" in t:
        return "fire"
    return "other"


# ══════════════════════════════════════════════════════════════
# RSS parser
# ══════════════════════════════════════════════════════════════

def _localname(tag: str) -> str:
    if "}" in tag:
        return tag.split("}", 1)[1]
    return tag


def _child(el: ET.Element, name: str) -> Optional[ET.Element]:
    for ch in el:
        if _localname(ch.tag) == name:
            return ch
    return None


def parse_feed(xml_text: str, coord: Coordinate) -> List[Alert]:
    """
    Every <item> carrying both <title> and <description> becomes one alert.

    Raises DecodeFailure on malformed XML.
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise DecodeFailure(f"gov alerts feed is not valid XML: {e}") from e

    out: List[Alert] = []
    for item in root.iter():
        if _localname(item.tag) != "item":
            continue
        title_el = _child(item, "title")
        desc_el = _child(item, "description")
        if title_el is None or desc_el is None:
            continue

        title = (title_el.text or "").strip()
        desc = (desc_el.text or "").strip()

        out.append(
            Alert(
                id=str(uuid.uuid4()),
                coordinate=coord,
                category=classify_title(title),
                description=f"{title}: {desc}",
                source=SOURCE,
            )
        )
    return out


# ══════════════════════════════════════════════════════════════
# Fetch
# ══════════════════════════════════════════════════════════════

async def fetch_gov_alerts(
    client: httpx.AsyncClient,
    coord: Coordinate,
    *,
    settings: Settings = default_settings,
) -> List[Alert]:
    """Fetch + parse the regional feed. Any failure degrades to []."""
    try:
        try:
            r = await client.get(settings.gov_alerts_url)
            logger.info("gov_alerts status=%d", r.status_code)
            r.raise_for_status()
        except httpx.HTTPError as e:
            raise NetworkFailure(str(e) or type(e).__name__) from e
        alerts = parse_feed(r.text, coord)
    except (NetworkFailure, DecodeFailure) as e:
        logger.warning("gov_alerts_failed: %s", e)
        return []

    logger.info("gov_alerts found=%d", len(alerts))
    return alerts
