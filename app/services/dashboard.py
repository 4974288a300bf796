# app/services/dashboard.py
"""
The single state holder behind the map + summary panel.

`Dashboard` owns the weather snapshot, the unified alert list, the loading
flag and the user-visible error. It is the only writer of that state; readers
get immutable `DashboardState` snapshots, either by polling `.state` or by
subscribing a callback that receives every new snapshot.

Refresh cycle (strictly sequential, one network call in flight at a time):

  1. clear alerts, loading on
  2. government feed   → append
  3. wildfires         → append (primary, fallback on failure)
  4. current weather   → replace snapshot + append derived alerts,
                         or set the error and keep the previous snapshot
  5. loading off

The resulting alert order is therefore government → wildfire → weather.
Refreshes are serialized: a refresh requested while one is running waits for
it, then runs its own full cycle.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, List, Optional

import httpx

from app.core.contracts import Alert, Coordinate, DashboardState
from app.core.errors import FetchError
from app.core.keying import refresh_key
from app.core.settings import Settings, settings as default_settings
from app.core.time import utc_now_iso
from app.services.gov_alerts import fetch_gov_alerts
from app.services.weather import derive_alerts, fetch_weather, weather_error_message
from app.services.wildfires import fetch_wildfires

logger = logging.getLogger(__name__)

Observer = Callable[[DashboardState], None]


class Dashboard:
    def __init__(
        self,
        *,
        settings: Settings = default_settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self._transport = transport
        self._state = DashboardState()
        self._observers: List[Observer] = []
        self._refresh_lock = asyncio.Lock()

    # ──────────────────────────────────────────────────────────────
    # Observation
    # ──────────────────────────────────────────────────────────────

    @property
    def state(self) -> DashboardState:
        return self._state

    @property
    def refreshing(self) -> bool:
        return self._refresh_lock.locked()

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register a callback; returns a function that unregisters it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def find_alert(self, alert_id: str) -> Optional[Alert]:
        for a in self._state.alerts:
            if a.id == alert_id:
                return a
        return None

    # ──────────────────────────────────────────────────────────────
    # Single writer
    # ──────────────────────────────────────────────────────────────

    def _update(self, **changes: Any) -> None:
        changes["updated_at"] = utc_now_iso()
        self._state = self._state.model_copy(update=changes)
        for observer in list(self._observers):
            try:
                observer(self._state)
            except Exception:
                logger.exception("dashboard_observer_failed observer=%r", observer)

    def _append(self, alerts: List[Alert]) -> None:
        if not alerts:
            return
        self._update(alerts=[*self._state.alerts, *alerts])

    # ──────────────────────────────────────────────────────────────
    # Refresh
    # ──────────────────────────────────────────────────────────────

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.settings.http_timeout_s,
            follow_redirects=True,
            headers={"User-Agent": self.settings.http_user_agent},
            transport=self._transport,
        )

    async def refresh(self, coord: Coordinate) -> None:
        if self.refreshing:
            logger.info("dashboard_refresh_queued lat=%.4f lon=%.4f", coord.lat, coord.lon)

        async with self._refresh_lock:
            key = refresh_key(coord, self.settings.algo_version)
            logger.info("dashboard_refresh_start key=%s lat=%.4f lon=%.4f", key, coord.lat, coord.lon)

            self._update(alerts=[], is_loading=True, coordinate=coord, refresh_key=key)
            try:
                async with self._client() as client:
                    self._append(await fetch_gov_alerts(client, coord, settings=self.settings))
                    self._append(await fetch_wildfires(client, coord, settings=self.settings))

                    try:
                        snapshot = await fetch_weather(client, coord, settings=self.settings)
                    except FetchError as e:
                        logger.warning("weather_failed: %s", e)
                        self._update(error=weather_error_message(e))
                    else:
                        self._update(weather=snapshot, error=None)
                        self._append(derive_alerts(snapshot, coord))
            finally:
                self._update(is_loading=False)

            logger.info("dashboard_refresh_done key=%s alerts=%d", key, len(self._state.alerts))
