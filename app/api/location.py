from __future__ import annotations

from fastapi import APIRouter, Depends

from app.core.contracts import Coordinate, LocationFixResponse
from app.services.location import LocationSource
from app.services.map_view import MapSession

router = APIRouter(prefix="/location")


def get_location_source() -> LocationSource:
    raise RuntimeError("LocationSource must be provided by app dependency override")


def get_map_session() -> MapSession:
    raise RuntimeError("MapSession must be provided by app dependency override")


@router.post("", response_model=LocationFixResponse)
async def location_fix(
    coord: Coordinate,
    location: LocationSource = Depends(get_location_source),
    session: MapSession = Depends(get_map_session),
) -> LocationFixResponse:
    initial = not session.has_initial_location
    location.publish(coord)

    # The first fix kicks off the initial refresh; answer once it has landed
    # so the client's first dashboard read is populated.
    if initial and session.initial_refresh is not None:
        await session.initial_refresh

    return LocationFixResponse(accepted=True, initial=initial)
