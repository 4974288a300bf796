from __future__ import annotations

import logging
import uuid
from typing import List

import httpx
from pydantic import ValidationError

from app.core.contracts import Alert, Coordinate, WeatherSnapshot
from app.core.errors import DecodeFailure, FetchError, NetworkFailure
from app.core.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

CURRENT_WEATHER_SOURCE = "Current Weather"
FIRE_RISK_SOURCE = "Weather Conditions"

# Derived alert thresholds (metric units)
HIGH_WIND_MS = 20.0
FIRE_RISK_MIN_TEMP_C = 25.0
FIRE_RISK_MIN_WIND_MS = 10.0
FIRE_RISK_MAX_HUMIDITY_PCT = 30

THUNDER_TEXT = "Thunderstorm conditions detected"
FIRE_RISK_TEXT = "High fire risk conditions: High temperature, low humidity, and strong winds"
DECODE_ERROR_TEXT = "Error parsing weather data. Please try again later."


async def fetch_weather(
    client: httpx.AsyncClient,
    coord: Coordinate,
    *,
    settings: Settings = default_settings,
) -> WeatherSnapshot:
    """
    Current conditions at a coordinate.

    Raises NetworkFailure for transport/HTTP errors and DecodeFailure when the
    payload is missing a field or carries one of the wrong type.
    """
    params = {
        "lat": str(coord.lat),
        "lon": str(coord.lon),
        "units": "metric",
        "appid": settings.openweather_api_key,
    }

    try:
        r = await client.get(settings.openweather_url, params=params)
        logger.info("weather status=%d", r.status_code)
        r.raise_for_status()
    except httpx.HTTPStatusError as e:
        # str(e) would echo the request URL, appid included
        raise NetworkFailure(f"HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        raise NetworkFailure(str(e) or type(e).__name__) from e

    try:
        return WeatherSnapshot.model_validate_json(r.content)
    except ValidationError as e:
        raise DecodeFailure(f"weather payload did not decode: {e.error_count()} error(s)") from e


def weather_error_message(err: FetchError) -> str:
    """User-facing text; decode problems and everything else read differently."""
    if isinstance(err, DecodeFailure):
        return DECODE_ERROR_TEXT
    return f"Failed to fetch weather data: {err}"


def derive_alerts(snapshot: WeatherSnapshot, coord: Coordinate) -> List[Alert]:
    """
    Synthetic alerts from current conditions. Rules are independent and may
    all fire at once; order is thunder, wind, fire risk.
    """
    out: List[Alert] = []

    if any("thunder" in c.description.lower() for c in snapshot.weather):
        out.append(
            Alert(
                id=str(uuid.uuid4()),
                coordinate=coord,
                category="thunder",
                description=THUNDER_TEXT,
                source=CURRENT_WEATHER_SOURCE,
            )
        )

    if snapshot.wind_speed > HIGH_WIND_MS:
        out.append(
            Alert(
                id=str(uuid.uuid4()),
                coordinate=coord,
                category="other",
                description=f"High wind conditions: {round(snapshot.wind_speed)} m/s",
                source=CURRENT_WEATHER_SOURCE,
            )
        )

    if (
        snapshot.temperature > FIRE_RISK_MIN_TEMP_C
        and snapshot.wind_speed > FIRE_RISK_MIN_WIND_MS
        and snapshot.humidity < FIRE_RISK_MAX_HUMIDITY_PCT
    ):
        out.append(
            Alert(
                id=str(uuid.uuid4()),
                coordinate=coord,
                category="fire",
                description=FIRE_RISK_TEXT,
                source=FIRE_RISK_SOURCE,
            )
        )

    return out
