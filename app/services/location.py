from __future__ import annotations

import logging
from typing import Callable, List, Optional

from app.core.contracts import Coordinate

logger = logging.getLogger(__name__)

LocationObserver = Callable[[Coordinate], None]


class LocationSource:
    """
    Latest device position, pushed in by the client on every fix.

    Subscribers are called synchronously, in registration order, with each
    new coordinate.
    """

    def __init__(self) -> None:
        self._current: Optional[Coordinate] = None
        self._observers: List[LocationObserver] = []

    @property
    def current(self) -> Optional[Coordinate]:
        return self._current

    def subscribe(self, observer: LocationObserver) -> Callable[[], None]:
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def publish(self, coord: Coordinate) -> None:
        self._current = coord
        logger.debug("location_fix lat=%.5f lon=%.5f", coord.lat, coord.lon)
        for observer in list(self._observers):
            observer(coord)
