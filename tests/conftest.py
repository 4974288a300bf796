from __future__ import annotations

import json
from typing import Callable, Dict, List, Optional

import httpx
import pytest

from app.core.contracts import Coordinate
from app.core.settings import Settings

GOV_HOST = "gov.test"
FIRES_HOST = "fires.test"
WFS_HOST = "wfs.test"
WEATHER_HOST = "weather.test"

Handler = Callable[[httpx.Request], httpx.Response]


class Upstream:
    """Routes requests to per-host handlers and records every call."""

    def __init__(self) -> None:
        self.handlers: Dict[str, Handler] = {}
        self.requests: List[httpx.Request] = []

    def on(self, host: str, handler: Handler) -> None:
        self.handlers[host] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.handlers.get(request.url.host)
        if handler is None:
            return httpx.Response(404, text="no handler")
        return handler(request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def calls(self, host: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]

    def hosts(self) -> List[str]:
        return [r.url.host for r in self.requests]


# ──────────────────────────────────────────────────────────────
# Canned upstream payloads
# ──────────────────────────────────────────────────────────────

def rss_feed(*items: tuple[str, Optional[str]]) -> str:
    parts = []
    for title, desc in items:
        body = f"<title>{title}</title>"
        if desc is not None:
            body += f"<description>{desc}</description>"
        parts.append(f"<item>{body}</item>")
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        "<rss version=\"2.0\"><channel><title>Warnings</title>"
        + "".join(parts)
        + "</channel></rss>"
    )


def weather_payload(
    *,
    temp: float = 18.0,
    humidity: int = 55,
    wind: float = 3.0,
    descriptions: tuple[str, ...] = ("scattered clouds",),
    lat: float = 49.25,
    lon: float = -123.1,
) -> dict:
    return {
        "coord": {"lon": lon, "lat": lat},
        "weather": [{"id": 802, "main": "Clouds", "description": d, "icon": "03d"} for d in descriptions],
        "main": {"temp": temp, "feels_like": temp - 1.0, "humidity": humidity, "pressure": 1012},
        "wind": {"speed": wind, "deg": 240},
        "name": "Vancouver",
    }


def primary_feature(attributes: dict, *, x: float = -122.9, y: float = 49.4) -> dict:
    return {"attributes": attributes, "geometry": {"x": x, "y": y}}


def fallback_feature(*, lon: float = -122.5, lat: float = 49.6, geometry_type: str = "Point", **overrides) -> dict:
    props = {
        "FIRE_NUMBER": "K71234",
        "FIRE_YEAR": 2025,
        "RESPONSE_TYPE_DESC": "Full",
        "IGNITION_DATE": "2025-07-01Z",
        "FIRE_OUT_DATE": None,
        "FIRE_STATUS": "Holding",
        "FIRE_CAUSE": "Lightning",
        "FIRE_TYPE": "Fire",
        "INCIDENT_NAME": "Ridge Creek",
        "GEOGRAPHIC_DESCRIPTION": "Ridge Creek",
        "CURRENT_SIZE": 12.34,
        "FIRE_URL": "https://wildfiresituation.nrs.gov.bc.ca/incidents",
        "SE_ANNO_CAD_DATA": None,
    }
    props.update(overrides)
    coords = [lon, lat] if geometry_type == "Point" else [[[lon, lat], [lon + 0.1, lat], [lon, lat + 0.1], [lon, lat]]]
    return {
        "type": "Feature",
        "id": "PROT_CURRENT_FIRE_PNTS_SP.1",
        "properties": props,
        "geometry": {"type": geometry_type, "coordinates": coords},
    }


def json_response(payload) -> Handler:
    return lambda request: httpx.Response(200, content=json.dumps(payload).encode("utf-8"))


def text_response(text: str, status: int = 200) -> Handler:
    return lambda request: httpx.Response(status, text=text)


def connect_error(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


# ──────────────────────────────────────────────────────────────
# Fixtures
# ──────────────────────────────────────────────────────────────

@pytest.fixture
def test_settings() -> Settings:
    return Settings().model_copy(
        update={
            "gov_alerts_url": f"https://{GOV_HOST}/rss/warning/bc-48_e.xml",
            "wildfire_primary_url": f"https://{FIRES_HOST}/FeatureServer/0/query",
            "wildfire_fallback_url": f"https://{WFS_HOST}/geo/pub/ows",
            "openweather_url": f"https://{WEATHER_HOST}/data/2.5/weather",
            "openweather_api_key": "test-key",
            "http_timeout_s": 5.0,
        }
    )


@pytest.fixture
def upstream() -> Upstream:
    return Upstream()


@pytest.fixture
def coord() -> Coordinate:
    return Coordinate(lat=49.25, lon=-123.1)
