from __future__ import annotations

from fastapi import APIRouter, Depends

from app.core.contracts import DashboardState, DashboardView, SelectAlertResponse
from app.core.errors import bad_request, not_found
from app.services.map_view import MapSession

router = APIRouter(prefix="/dashboard")


def get_map_session() -> MapSession:
    raise RuntimeError("MapSession must be provided by app dependency override")


@router.get("", response_model=DashboardView)
def dashboard_view(session: MapSession = Depends(get_map_session)) -> DashboardView:
    return session.view()


@router.get("/state", response_model=DashboardState)
def dashboard_state(session: MapSession = Depends(get_map_session)) -> DashboardState:
    return session.dashboard.state


@router.post("/refresh", response_model=DashboardView)
async def dashboard_refresh(session: MapSession = Depends(get_map_session)) -> DashboardView:
    if not await session.recenter_and_refresh():
        bad_request("no_location", "no location fix received yet")
    return session.view()


@router.post("/alerts/{alert_id}/select", response_model=SelectAlertResponse)
def select_alert(
    alert_id: str,
    session: MapSession = Depends(get_map_session),
) -> SelectAlertResponse:
    alert = session.dashboard.find_alert(alert_id)
    if alert is None:
        not_found("alert_not_found", f"no alert with id {alert_id}")
    recentered = session.select_alert(alert)
    return SelectAlertResponse(recentered=recentered, region=session.region)
