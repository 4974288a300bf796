from __future__ import annotations

import asyncio
import json

import httpx

from app.core.contracts import Coordinate, DashboardState
from app.core.keying import refresh_key
from app.services.dashboard import Dashboard

from conftest import (
    FIRES_HOST,
    GOV_HOST,
    WEATHER_HOST,
    connect_error,
    json_response,
    primary_feature,
    rss_feed,
    text_response,
    weather_payload,
)


def _wire_all_sources(upstream, *, weather=None):
    upstream.on(GOV_HOST, text_response(rss_feed(("Severe Thunderstorm Warning", "Metro Vancouver"))))
    upstream.on(FIRES_HOST, json_response({
        "features": [primary_feature({"FIRE_NUMBER": "V10001", "FIRE_STATUS": "Out of Control"})],
    }))
    upstream.on(WEATHER_HOST, json_response(weather or weather_payload(temp=30.0, wind=12.0, humidity=20)))


def test_refresh_orders_sources_and_clears_loading(upstream, coord, test_settings):
    _wire_all_sources(upstream)
    dash = Dashboard(settings=test_settings, transport=upstream.transport())

    asyncio.run(dash.refresh(coord))

    state = dash.state
    assert upstream.hosts() == [GOV_HOST, FIRES_HOST, WEATHER_HOST]
    assert [(a.source, a.category) for a in state.alerts] == [
        ("Environment Canada", "thunder"),
        ("BC Wildfire Service", "fire"),
        ("Weather Conditions", "fire"),
    ]
    assert state.is_loading is False
    assert state.error is None
    assert state.weather is not None and state.weather.temperature == 30.0
    assert state.coordinate == coord
    assert state.refresh_key == refresh_key(coord, test_settings.algo_version)
    assert state.updated_at


def test_refresh_replaces_previous_alerts(upstream, coord, test_settings):
    _wire_all_sources(upstream)
    dash = Dashboard(settings=test_settings, transport=upstream.transport())

    asyncio.run(dash.refresh(coord))
    first_ids = {a.id for a in dash.state.alerts}
    asyncio.run(dash.refresh(coord))

    assert len(dash.state.alerts) == 3
    assert first_ids.isdisjoint({a.id for a in dash.state.alerts})


def test_weather_failure_keeps_snapshot_and_sets_error(upstream, coord, test_settings):
    _wire_all_sources(upstream, weather=weather_payload(temp=12.0))
    dash = Dashboard(settings=test_settings, transport=upstream.transport())
    asyncio.run(dash.refresh(coord))
    previous = dash.state.weather

    broken = weather_payload()
    del broken["main"]
    upstream.on(WEATHER_HOST, json_response(broken))
    asyncio.run(dash.refresh(coord))

    state = dash.state
    assert state.weather == previous
    assert state.error == "Error parsing weather data. Please try again later."
    assert [a.source for a in state.alerts] == ["Environment Canada", "BC Wildfire Service"]
    assert state.is_loading is False


def test_weather_success_clears_previous_error(upstream, coord, test_settings):
    _wire_all_sources(upstream)
    upstream.on(WEATHER_HOST, connect_error)
    dash = Dashboard(settings=test_settings, transport=upstream.transport())
    asyncio.run(dash.refresh(coord))
    assert dash.state.error is not None
    assert dash.state.error.startswith("Failed to fetch weather data: ")
    assert dash.state.weather is None

    upstream.on(WEATHER_HOST, json_response(weather_payload()))
    asyncio.run(dash.refresh(coord))

    assert dash.state.error is None
    assert dash.state.weather is not None


def test_failed_feeds_are_absorbed(upstream, coord, test_settings):
    upstream.on(GOV_HOST, connect_error)
    upstream.on(FIRES_HOST, connect_error)
    upstream.on(WEATHER_HOST, json_response(weather_payload()))
    dash = Dashboard(settings=test_settings, transport=upstream.transport())

    asyncio.run(dash.refresh(coord))

    assert dash.state.alerts == []
    assert dash.state.error is None


def test_observers_see_every_step(upstream, coord, test_settings):
    _wire_all_sources(upstream)
    dash = Dashboard(settings=test_settings, transport=upstream.transport())
    seen: list[DashboardState] = []
    dash.subscribe(seen.append)

    asyncio.run(dash.refresh(coord))

    assert seen[0].is_loading is True
    assert seen[0].alerts == []
    assert seen[-1].is_loading is False
    assert [len(s.alerts) for s in seen] == sorted(len(s.alerts) for s in seen)
    assert seen[-1] == dash.state


def test_unsubscribe_and_failing_observer(upstream, coord, test_settings):
    _wire_all_sources(upstream)
    dash = Dashboard(settings=test_settings, transport=upstream.transport())
    seen: list[DashboardState] = []

    def explode(state: DashboardState) -> None:
        raise RuntimeError("observer bug")

    dash.subscribe(explode)
    unsubscribe = dash.subscribe(seen.append)
    unsubscribe()

    asyncio.run(dash.refresh(coord))

    assert seen == []
    assert len(dash.state.alerts) == 3


def test_find_alert(upstream, coord, test_settings):
    _wire_all_sources(upstream)
    dash = Dashboard(settings=test_settings, transport=upstream.transport())
    asyncio.run(dash.refresh(coord))

    target = dash.state.alerts[1]
    assert dash.find_alert(target.id) == target
    assert dash.find_alert("missing") is None


def test_overlapping_refreshes_are_serialized(coord, test_settings):
    other = Coordinate(lat=50.67, lon=-120.33)
    hosts: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        hosts.append(request.url.host)
        # yield so an unguarded second refresh would interleave here
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        if request.url.host == GOV_HOST:
            return httpx.Response(200, text=rss_feed(("Frost Warning", "Kamloops")))
        if request.url.host == FIRES_HOST:
            return httpx.Response(200, content=json.dumps({"features": []}).encode())
        return httpx.Response(200, content=json.dumps(weather_payload()).encode())

    dash = Dashboard(settings=test_settings, transport=httpx.MockTransport(handler))
    loading_flags: list[bool] = []
    dash.subscribe(lambda s: loading_flags.append(s.is_loading))

    async def run():
        await asyncio.gather(dash.refresh(coord), dash.refresh(other))

    asyncio.run(run())

    cycle = [GOV_HOST, FIRES_HOST, WEATHER_HOST]
    assert hosts == cycle + cycle
    assert len(dash.state.alerts) == 1
    assert dash.state.coordinate == other
    assert dash.state.alerts[0].coordinate == other
    assert dash.state.is_loading is False
    assert loading_flags[-1] is False
