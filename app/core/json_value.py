# app/core/json_value.py
"""
Tagged JSON value for schemaless corners of upstream payloads.

GeoJSON `coordinates` changes shape with the geometry type (a position for
Point, nested rings for Polygon, ...). Rather than carrying `Any` around, the
raw value is wrapped once and read back through explicit accessors that
return None on a shape mismatch.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional, Tuple

JsonKind = Literal["null", "bool", "number", "string", "array", "object"]


@dataclass(frozen=True)
class JsonValue:
    kind: JsonKind
    value: Any = None

    @classmethod
    def of(cls, raw: Any) -> "JsonValue":
        if raw is None:
            return cls("null")
        # bool before number: bool is an int subclass
        if isinstance(raw, bool):
            return cls("bool", raw)
        if isinstance(raw, (int, float)):
            return cls("number", raw)
        if isinstance(raw, str):
            return cls("string", raw)
        if isinstance(raw, (list, tuple)):
            return cls("array", tuple(cls.of(v) for v in raw))
        if isinstance(raw, dict):
            return cls("object", {str(k): cls.of(v) for k, v in raw.items()})
        raise ValueError(f"cannot represent {type(raw).__name__} as JSON")

    # ── accessors ──

    @property
    def is_null(self) -> bool:
        return self.kind == "null"

    def as_bool(self) -> Optional[bool]:
        return self.value if self.kind == "bool" else None

    def as_number(self) -> Optional[float]:
        if self.kind != "number":
            return None
        f = float(self.value)
        return f if math.isfinite(f) else None

    def as_string(self) -> Optional[str]:
        return self.value if self.kind == "string" else None

    def as_array(self) -> Optional[List["JsonValue"]]:
        return list(self.value) if self.kind == "array" else None

    def as_object(self) -> Optional[Dict[str, "JsonValue"]]:
        return dict(self.value) if self.kind == "object" else None

    def get(self, key: str) -> Optional["JsonValue"]:
        obj = self.as_object()
        if obj is None:
            return None
        return obj.get(key)

    def as_position(self) -> Optional[Tuple[float, float]]:
        """GeoJSON position [lon, lat, (alt)] → (lon, lat)."""
        arr = self.as_array()
        if arr is None or len(arr) < 2:
            return None
        lon = arr[0].as_number()
        lat = arr[1].as_number()
        if lon is None or lat is None:
            return None
        return (lon, lat)

    def to_python(self) -> Any:
        if self.kind == "array":
            return [v.to_python() for v in self.value]
        if self.kind == "object":
            return {k: v.to_python() for k, v in self.value.items()}
        return self.value
