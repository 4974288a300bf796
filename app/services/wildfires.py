# app/services/wildfires.py
"""
BC wildfire locations near a coordinate.

Sources:
  - Primary:  BC Wildfire Service ArcGIS feature service (radius query)
  - Fallback: BC open data WFS point layer (bbox query, GeoJSON)

The fallback is queried only when the primary request fails outright
(network error, HTTP error or a payload that does not decode). A primary
response with zero features is a valid empty result and does not fall back.
"""
from __future__ import annotations

import logging
import uuid
from typing import Dict, List

import httpx
from pydantic import BaseModel, ValidationError

from app.core.contracts import (
    Alert,
    Coordinate,
    FireLocationsResponse,
    GeoJSONResponse,
)
from app.core.errors import DecodeFailure, FetchError, NetworkFailure
from app.core.geo import bbox_around, bbox_param, esri_point_param
from app.core.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

PRIMARY_SOURCE = "BC Wildfire Service"
FALLBACK_SOURCE = "BC Government Data"

_OUT_FIELDS = ",".join([
    "FIRE_NUMBER",
    "FIRE_STATUS",
    "FIRE_TYPE",
    "FIRE_CAUSE",
    "FIRE_SIZE_HECTARES",
    "DISCOVERY_DATE",
    "FIRE_YEAR",
    "RESPONSE_TYPE_DESC",
    "FIRE_LOCATION_NAME",
])


# ══════════════════════════════════════════════════════════════
# Shared helpers
# ══════════════════════════════════════════════════════════════

def fire_description(number: str, status: str, location: str, fire_type: str, size_ha: float) -> str:
    return (
        f"Fire #{number} - {status}\n"
        f"Location: {location}\n"
        f"Type: {fire_type}\n"
        f"Size: {float(size_ha):.1f} hectares"
    )


def _status_where(statuses: List[str]) -> str:
    quoted = ", ".join("'" + s.replace("'", "''") + "'" for s in statuses)
    return f"FIRE_STATUS IN ({quoted})"


async def _get_model(
    client: httpx.AsyncClient,
    url: str,
    params: Dict[str, str],
    model: type[BaseModel],
    *,
    name: str,
):
    try:
        r = await client.get(url, params=params)
        logger.info("%s status=%d", name, r.status_code)
        r.raise_for_status()
    except httpx.HTTPError as e:
        raise NetworkFailure(str(e) or type(e).__name__) from e

    try:
        return model.model_validate_json(r.content)
    except ValidationError as e:
        raise DecodeFailure(f"{name} payload did not decode: {e.error_count()} error(s)") from e


# ══════════════════════════════════════════════════════════════
# Primary: ArcGIS feature service
# ══════════════════════════════════════════════════════════════

def primary_params(coord: Coordinate, *, settings: Settings = default_settings) -> Dict[str, str]:
    return {
        "where": _status_where(settings.wildfire_status_list()),
        "outFields": _OUT_FIELDS,
        "geometryType": "esriGeometryPoint",
        "spatialRel": "esriSpatialRelWithin",
        "geometry": esri_point_param(coord),
        "distance": str(int(settings.wildfire_radius_m)),
        "units": "esriSRUnit_Meter",
        "inSR": "4326",
        "outSR": "4326",
        "f": "json",
        "returnGeometry": "true",
    }


def parse_primary(resp: FireLocationsResponse) -> List[Alert]:
    out: List[Alert] = []
    for feat in resp.features:
        a = feat.attributes
        # Records without a number or status can't be described; skip them
        if a.FIRE_NUMBER is None or a.FIRE_STATUS is None:
            continue
        coord = Coordinate.checked(feat.geometry.y, feat.geometry.x)
        if coord is None:
            continue

        out.append(
            Alert(
                id=str(uuid.uuid4()),
                coordinate=coord,
                category="fire",
                description=fire_description(
                    a.FIRE_NUMBER,
                    a.FIRE_STATUS,
                    a.FIRE_LOCATION_NAME if a.FIRE_LOCATION_NAME is not None else "Unknown Location",
                    a.FIRE_TYPE if a.FIRE_TYPE is not None else "Unknown",
                    a.FIRE_SIZE_HECTARES if a.FIRE_SIZE_HECTARES is not None else 0.0,
                ),
                source=PRIMARY_SOURCE,
            )
        )
    return out


async def fetch_primary(
    client: httpx.AsyncClient,
    coord: Coordinate,
    *,
    settings: Settings = default_settings,
) -> List[Alert]:
    """Raises NetworkFailure / DecodeFailure."""
    resp = await _get_model(
        client,
        settings.wildfire_primary_url,
        primary_params(coord, settings=settings),
        FireLocationsResponse,
        name="wildfires_primary",
    )
    return parse_primary(resp)


# ══════════════════════════════════════════════════════════════
# Fallback: WFS GeoJSON
# ══════════════════════════════════════════════════════════════

def fallback_params(coord: Coordinate, *, settings: Settings = default_settings) -> Dict[str, str]:
    bbox = bbox_around(coord, settings.wildfire_fallback_bbox_deg)
    return {
        "service": "WFS",
        "version": "2.0.0",
        "request": "GetFeature",
        "typeName": settings.wildfire_fallback_type_name,
        "outputFormat": "application/json",
        "srsName": "EPSG:4326",
        "bbox": bbox_param(bbox, "EPSG:4326"),
    }


def parse_fallback(resp: GeoJSONResponse) -> List[Alert]:
    out: List[Alert] = []
    for feat in resp.features:
        # Point layer; anything else has no single marker position
        coord = feat.geometry.point()
        if coord is None:
            continue

        p = feat.properties
        out.append(
            Alert(
                id=str(uuid.uuid4()),
                coordinate=coord,
                category="fire",
                description=fire_description(
                    p.FIRE_NUMBER,
                    p.FIRE_STATUS,
                    p.GEOGRAPHIC_DESCRIPTION,
                    p.FIRE_TYPE,
                    p.CURRENT_SIZE,
                ),
                source=FALLBACK_SOURCE,
            )
        )
    return out


async def fetch_fallback(
    client: httpx.AsyncClient,
    coord: Coordinate,
    *,
    settings: Settings = default_settings,
) -> List[Alert]:
    """Raises NetworkFailure / DecodeFailure."""
    resp = await _get_model(
        client,
        settings.wildfire_fallback_url,
        fallback_params(coord, settings=settings),
        GeoJSONResponse,
        name="wildfires_fallback",
    )
    return parse_fallback(resp)


# ══════════════════════════════════════════════════════════════
# Entry point
# ══════════════════════════════════════════════════════════════

async def fetch_wildfires(
    client: httpx.AsyncClient,
    coord: Coordinate,
    *,
    settings: Settings = default_settings,
) -> List[Alert]:
    """Primary, then fallback on failure. Never raises; failures degrade to []."""
    try:
        alerts = await fetch_primary(client, coord, settings=settings)
        logger.info("wildfires_primary found=%d", len(alerts))
        return alerts
    except FetchError as e:
        logger.warning("wildfires_primary_failed: %s, trying fallback", e)

    try:
        alerts = await fetch_fallback(client, coord, settings=settings)
    except FetchError as e:
        logger.warning("wildfires_fallback_failed: %s", e)
        return []

    logger.info("wildfires_fallback found=%d", len(alerts))
    return alerts
