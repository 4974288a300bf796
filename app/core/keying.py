from __future__ import annotations

import base64
import hashlib
from typing import Any

import orjson

from app.core.contracts import Coordinate


def _orjson_dumps(obj: Any) -> bytes:
    return orjson.dumps(
        obj,
        option=orjson.OPT_SORT_KEYS | orjson.OPT_NON_STR_KEYS,
    )


def sha256_b32(data: bytes) -> str:
    h = hashlib.sha256(data).digest()
    # URL-safe base32-ish: we use base64 urlsafe with no padding for brevity
    return base64.urlsafe_b64encode(h).decode("ascii").rstrip("=")


def normalize_coordinate(coord: Coordinate) -> dict[str, float]:
    """~11cm precision; fixes that differ below that share a key."""
    return {"lat": round(float(coord.lat), 6), "lon": round(float(coord.lon), 6)}


def refresh_key(coord: Coordinate, algo_version: str) -> str:
    payload = {"algo_version": algo_version, "coord": normalize_coordinate(coord)}
    return sha256_b32(_orjson_dumps(payload))
