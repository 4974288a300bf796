from __future__ import annotations

from typing import Any, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, field_validator

from app.core.json_value import JsonValue


# ──────────────────────────────────────────────────────────────
# Shared
# ──────────────────────────────────────────────────────────────

class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90.0, le=90.0)
    lon: float = Field(ge=-180.0, le=180.0)

    @classmethod
    def checked(cls, lat: float, lon: float) -> Optional["Coordinate"]:
        """None instead of a validation error for out-of-range input."""
        if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
            return None
        return cls(lat=lat, lon=lon)


class BBox4(BaseModel):
    minLng: float
    minLat: float
    maxLng: float
    maxLat: float


# ──────────────────────────────────────────────────────────────
# Weather (OpenWeatherMap current conditions)
# ──────────────────────────────────────────────────────────────
# Strict scalars: a missing or mistyped field fails the whole decode.
# Unknown fields (visibility, clouds, sys, ...) are ignored.

class WeatherMain(BaseModel):
    model_config = ConfigDict(frozen=True)

    temp: StrictFloat
    humidity: StrictInt
    feels_like: StrictFloat


class WeatherCondition(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: StrictStr
    icon: StrictStr


class WeatherWind(BaseModel):
    model_config = ConfigDict(frozen=True)

    speed: StrictFloat
    deg: StrictInt


class WeatherCoord(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: StrictFloat
    lon: StrictFloat


class WeatherSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    main: WeatherMain
    weather: List[WeatherCondition]
    wind: WeatherWind
    coord: WeatherCoord

    @property
    def temperature(self) -> float:
        return self.main.temp

    @property
    def humidity(self) -> int:
        return self.main.humidity

    @property
    def feels_like(self) -> float:
        return self.main.feels_like

    @property
    def wind_speed(self) -> float:
        return self.wind.speed

    @property
    def wind_deg(self) -> int:
        return self.wind.deg

    @property
    def conditions(self) -> List[WeatherCondition]:
        return list(self.weather)


# ──────────────────────────────────────────────────────────────
# Alerts
# ──────────────────────────────────────────────────────────────

AlertCategory = Literal["fire", "thunder", "other"]


class Alert(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    coordinate: Coordinate
    category: AlertCategory = "other"
    description: str            # fire details are multi-line
    source: str                 # "Environment Canada", "BC Wildfire Service", ...


class DashboardState(BaseModel):
    model_config = ConfigDict(frozen=True)

    coordinate: Optional[Coordinate] = None
    weather: Optional[WeatherSnapshot] = None
    alerts: List[Alert] = Field(default_factory=list)
    is_loading: bool = False
    error: Optional[str] = None
    refresh_key: Optional[str] = None
    updated_at: Optional[str] = None    # ISO8601 UTC


# ──────────────────────────────────────────────────────────────
# Wildfires: BCWS ArcGIS feature service (primary)
# ──────────────────────────────────────────────────────────────

class FireLocationAttributes(BaseModel):
    FIRE_NUMBER: Optional[str] = None
    FIRE_STATUS: Optional[str] = None
    FIRE_TYPE: Optional[str] = None
    FIRE_CAUSE: Optional[str] = None
    FIRE_SIZE_HECTARES: Optional[float] = None
    DISCOVERY_DATE: Optional[Any] = None    # epoch millis or string depending on layer version
    FIRE_YEAR: Optional[int] = None
    RESPONSE_TYPE_DESC: Optional[str] = None
    FIRE_LOCATION_NAME: Optional[str] = None


class FireLocationGeometry(BaseModel):
    x: float    # lon
    y: float    # lat


class FireLocationFeature(BaseModel):
    attributes: FireLocationAttributes
    geometry: FireLocationGeometry


class FireLocationsResponse(BaseModel):
    features: List[FireLocationFeature]


# ──────────────────────────────────────────────────────────────
# Wildfires: BC open data WFS (fallback, GeoJSON)
# ──────────────────────────────────────────────────────────────
# Every non-Optional property is required; a feature missing one fails the
# whole response.

class FirePointProperties(BaseModel):
    FIRE_NUMBER: str
    FIRE_YEAR: int
    RESPONSE_TYPE_DESC: Optional[str] = None
    IGNITION_DATE: str
    FIRE_OUT_DATE: Optional[str] = None
    FIRE_STATUS: str
    FIRE_CAUSE: str
    FIRE_TYPE: str
    INCIDENT_NAME: str
    GEOGRAPHIC_DESCRIPTION: str
    CURRENT_SIZE: float
    FIRE_URL: str
    SE_ANNO_CAD_DATA: Optional[str] = None


class GeoJSONGeometry(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    type: str
    coordinates: JsonValue

    @field_validator("coordinates", mode="before")
    @classmethod
    def _wrap_coordinates(cls, v: Any) -> JsonValue:
        if isinstance(v, JsonValue):
            return v
        return JsonValue.of(v)

    def point(self) -> Optional[Coordinate]:
        """Coordinate of a Point geometry, None for anything else."""
        if self.type != "Point":
            return None
        pos = self.coordinates.as_position()
        if pos is None:
            return None
        lon, lat = pos
        return Coordinate.checked(lat, lon)


class GeoJSONFeature(BaseModel):
    type: str
    id: str
    properties: FirePointProperties
    geometry: GeoJSONGeometry


class GeoJSONResponse(BaseModel):
    type: str
    features: List[GeoJSONFeature]


# ──────────────────────────────────────────────────────────────
# Presentation
# ──────────────────────────────────────────────────────────────

MarkerIcon = Literal["flame", "cloud_bolt", "warning"]
MarkerTint = Literal["red", "gray", "yellow", "orange"]


class MapRegion(BaseModel):
    center: Coordinate
    lat_delta: float = 0.05
    lon_delta: float = 0.05


class MapMarker(BaseModel):
    alert_id: str
    coordinate: Coordinate
    category: AlertCategory
    icon: MarkerIcon
    tint: MarkerTint
    active: bool = False
    label: Optional[str] = None     # fire markers only: first description line


class AlertRow(BaseModel):
    alert_id: str
    heading: str                    # "Fire Alert", "Thunderstorm Alert", "Weather Alert"
    description: str
    source: str
    icon: MarkerIcon
    tint: MarkerTint
    active: bool = False


class WeatherSummary(BaseModel):
    temperature: str                # "21°C"
    condition: str                  # "Scattered Clouds"
    humidity: str                   # "Humidity: 40%"
    wind: str                       # "Wind: 3 m/s"


class DashboardView(BaseModel):
    region: MapRegion
    weather: Optional[WeatherSummary] = None
    error: Optional[str] = None
    is_loading: bool = False
    alerts_title: str
    alerts: List[AlertRow] = Field(default_factory=list)
    markers: List[MapMarker] = Field(default_factory=list)
    updated_at: Optional[str] = None


class SelectAlertResponse(BaseModel):
    recentered: bool
    region: MapRegion


class LocationFixResponse(BaseModel):
    accepted: bool
    initial: bool


class HealthResponse(BaseModel):
    ok: bool
    service: str
    version: str
