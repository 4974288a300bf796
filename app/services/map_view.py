# app/services/map_view.py
"""
Map + summary panel presentation.

`MapSession` is the client-facing side of the dashboard: it owns the visible
map region, turns the first location fix into the initial refresh, and
handles the two user actions (recenter-and-refresh, select alert).
`build_view` flattens a DashboardState into what the client draws.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from app.core.contracts import (
    Alert,
    AlertRow,
    Coordinate,
    DashboardState,
    DashboardView,
    MapMarker,
    MapRegion,
    MarkerIcon,
    MarkerTint,
    WeatherSnapshot,
    WeatherSummary,
)
from app.core.settings import Settings, settings as default_settings
from app.services.dashboard import Dashboard
from app.services.location import LocationSource

logger = logging.getLogger(__name__)

# Status fragments that mark a fire as still burning. Matched against the
# alert description, which embeds FIRE_STATUS on its first line.
ACTIVE_FIRE_STATUSES = ("Out of Control", "Holding", "Under Control")

_HEADINGS = {
    "fire": "Fire Alert",
    "thunder": "Thunderstorm Alert",
    "other": "Weather Alert",
}

_ICONS: dict[str, MarkerIcon] = {
    "fire": "flame",
    "thunder": "cloud_bolt",
    "other": "warning",
}


# ══════════════════════════════════════════════════════════════
# Derived presentation logic
# ══════════════════════════════════════════════════════════════

def is_active_fire(alert: Alert) -> bool:
    if alert.category != "fire":
        return False
    return any(s in alert.description for s in ACTIVE_FIRE_STATUSES)


def alert_tint(alert: Alert) -> MarkerTint:
    if alert.category == "fire":
        return "red" if is_active_fire(alert) else "gray"
    if alert.category == "thunder":
        return "yellow"
    return "orange"


def marker_for(alert: Alert) -> MapMarker:
    label: Optional[str] = None
    if alert.category == "fire":
        label = alert.description.split("\n", 1)[0]
    return MapMarker(
        alert_id=alert.id,
        coordinate=alert.coordinate,
        category=alert.category,
        icon=_ICONS[alert.category],
        tint=alert_tint(alert),
        active=is_active_fire(alert),
        label=label,
    )


def row_for(alert: Alert) -> AlertRow:
    return AlertRow(
        alert_id=alert.id,
        heading=_HEADINGS[alert.category],
        description=alert.description,
        source=alert.source,
        icon=_ICONS[alert.category],
        tint=alert_tint(alert),
        active=is_active_fire(alert),
    )


def weather_summary(snapshot: WeatherSnapshot) -> WeatherSummary:
    condition = snapshot.weather[0].description.title() if snapshot.weather else ""
    return WeatherSummary(
        temperature=f"{int(snapshot.temperature)}°C",
        condition=condition,
        humidity=f"Humidity: {snapshot.humidity}%",
        wind=f"Wind: {int(snapshot.wind_speed)} m/s",
    )


def build_view(state: DashboardState, region: MapRegion) -> DashboardView:
    return DashboardView(
        region=region,
        weather=weather_summary(state.weather) if state.weather else None,
        error=state.error,
        is_loading=state.is_loading,
        alerts_title=f"Alerts ({len(state.alerts)})",
        alerts=[row_for(a) for a in state.alerts],
        markers=[marker_for(a) for a in state.alerts],
        updated_at=state.updated_at,
    )


# ══════════════════════════════════════════════════════════════
# Session
# ══════════════════════════════════════════════════════════════

class MapSession:
    def __init__(
        self,
        *,
        dashboard: Dashboard,
        location: LocationSource,
        settings: Settings = default_settings,
    ):
        self.dashboard = dashboard
        self.location = location
        self.span = float(settings.map_span_deg)
        self.region = MapRegion(
            center=Coordinate(lat=settings.map_default_lat, lon=settings.map_default_lon),
            lat_delta=self.span,
            lon_delta=self.span,
        )
        self.has_initial_location = False
        self.initial_refresh: Optional[asyncio.Task] = None
        self._unsubscribe = location.subscribe(self._on_location)

    def close(self) -> None:
        self._unsubscribe()

    def _recenter(self, coord: Coordinate, *, reset_span: bool = False) -> None:
        if reset_span:
            self.region = MapRegion(center=coord, lat_delta=self.span, lon_delta=self.span)
        else:
            self.region = self.region.model_copy(update={"center": coord})

    def _on_location(self, coord: Coordinate) -> None:
        # Only the first fix moves the map and triggers a refresh; later
        # fixes just update the source for the next recenter.
        if self.has_initial_location:
            return
        self.has_initial_location = True
        self._recenter(coord)
        logger.info("map_initial_location lat=%.4f lon=%.4f", coord.lat, coord.lon)
        self.initial_refresh = asyncio.get_running_loop().create_task(self.dashboard.refresh(coord))

    async def recenter_and_refresh(self) -> bool:
        """False when no fix has been received yet."""
        coord = self.location.current
        if coord is None:
            return False
        self._recenter(coord)
        await self.dashboard.refresh(coord)
        return True

    def select_alert(self, alert: Alert) -> bool:
        """Fire alerts recenter the map on themselves; other kinds are a no-op."""
        if alert.category != "fire":
            return False
        self._recenter(alert.coordinate, reset_span=True)
        return True

    def view(self) -> DashboardView:
        return build_view(self.dashboard.state, self.region)
