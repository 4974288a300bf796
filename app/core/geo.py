# app/core/geo.py
"""
Small geometry helpers for the wildfire fetchers.

Upstream services disagree on axis order: ArcGIS points are {x: lon, y: lat},
WFS bboxes are lon-first, and our own Coordinate is lat-first. Everything that
crosses that boundary goes through here.
"""
from __future__ import annotations

from app.core.contracts import BBox4, Coordinate


def bbox_around(coord: Coordinate, half_width_deg: float) -> BBox4:
    """
    Square bbox of ±half_width_deg around a coordinate.

    >>> bbox_around(Coordinate(lat=49.0, lon=-123.0), 1.0)
    BBox4(minLng=-124.0, minLat=48.0, maxLng=-122.0, maxLat=50.0)
    """
    d = float(half_width_deg)
    return BBox4(
        minLng=coord.lon - d,
        minLat=coord.lat - d,
        maxLng=coord.lon + d,
        maxLat=coord.lat + d,
    )


def bbox_param(bbox: BBox4, crs: str = "EPSG:4326") -> str:
    """WFS 2.0 bbox parameter: minLon,minLat,maxLon,maxLat,CRS."""
    return "%.6f,%.6f,%.6f,%.6f,%s" % (bbox.minLng, bbox.minLat, bbox.maxLng, bbox.maxLat, crs)


def esri_point_param(coord: Coordinate) -> str:
    """ArcGIS REST point geometry: {"x":lon,"y":lat}."""
    return '{"x":%.6f,"y":%.6f}' % (coord.lon, coord.lat)
