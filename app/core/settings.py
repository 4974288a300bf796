from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    # Versioning
    algo_version: str = Field(default="weatherman.v1.bc", alias="ALGO_VERSION")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Shared HTTP client (no retries, no backoff)
    http_timeout_s: float = Field(default=60.0, alias="HTTP_TIMEOUT_S")
    http_user_agent: str = Field(default="weatherman/alerts", alias="HTTP_USER_AGENT")

    # ──────────────────────────────────────────────────────────────
    # Current weather: OpenWeatherMap 2.5
    # ──────────────────────────────────────────────────────────────

    openweather_url: str = Field(
        default="https://api.openweathermap.org/data/2.5/weather",
        alias="OPENWEATHER_URL",
    )
    openweather_api_key: str = Field(default="", alias="OPENWEATHER_API_KEY")

    # ──────────────────────────────────────────────────────────────
    # Government alerts: Environment Canada RSS warnings
    # Regional feed, not queried by geography.
    # ──────────────────────────────────────────────────────────────

    gov_alerts_url: str = Field(
        default="https://weather.gc.ca/rss/warning/bc-48_e.xml",
        alias="GOV_ALERTS_URL",
    )

    # ──────────────────────────────────────────────────────────────
    # Wildfires: BC Wildfire Service ArcGIS feature service (primary)
    # ──────────────────────────────────────────────────────────────

    wildfire_primary_url: str = Field(
        default=(
            "https://services6.arcgis.com/ubm4tcTYICKBpist/arcgis/rest/services/"
            "BCWS_FireLocations_PublicView/FeatureServer/0/query"
        ),
        alias="WILDFIRE_PRIMARY_URL",
    )
    wildfire_radius_m: int = Field(default=100000, alias="WILDFIRE_RADIUS_M")
    # Comma-separated FIRE_STATUS values included in the query
    wildfire_statuses: str = Field(
        default="Out of Control,Holding,Under Control,Out",
        alias="WILDFIRE_STATUSES",
    )

    # ──────────────────────────────────────────────────────────────
    # Wildfires: BC open data WFS (fallback, only when primary fails)
    # ──────────────────────────────────────────────────────────────

    wildfire_fallback_url: str = Field(
        default="https://openmaps.gov.bc.ca/geo/pub/WHSE_LAND_AND_NATURAL_RESOURCE.PROT_CURRENT_FIRE_PNTS_SP/ows",
        alias="WILDFIRE_FALLBACK_URL",
    )
    wildfire_fallback_type_name: str = Field(
        default="WHSE_LAND_AND_NATURAL_RESOURCE.PROT_CURRENT_FIRE_PNTS_SP",
        alias="WILDFIRE_FALLBACK_TYPE_NAME",
    )
    wildfire_fallback_bbox_deg: float = Field(default=1.0, alias="WILDFIRE_FALLBACK_BBOX_DEG")

    # ──────────────────────────────────────────────────────────────
    # Map defaults (before the first location fix)
    # ──────────────────────────────────────────────────────────────

    map_default_lat: float = Field(default=37.7749, alias="MAP_DEFAULT_LAT")
    map_default_lon: float = Field(default=-122.4194, alias="MAP_DEFAULT_LON")
    map_span_deg: float = Field(default=0.05, alias="MAP_SPAN_DEG")

    def wildfire_status_list(self) -> list[str]:
        return [s.strip() for s in (self.wildfire_statuses or "").split(",") if s.strip()]


settings = Settings()
