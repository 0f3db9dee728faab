import asyncio
import random
from datetime import datetime

import httpx
import pytest

from conftest import FakePlacesApi, make_places_service
from src.models.view_models import CrowdLevel
from src.services.venue_status_service import (
    SimulatedVenueSignals, VenueStatusMonitor, VenueStatusState, build_venue_data,
    crowd_level_for_hour, crowd_tone, wait_time_tone,
)
from src.utils.config import AppConfig

# 2024-06-16 is a Sunday
SUNDAY_NOON = datetime(2024, 6, 16, 12, 0)

VENUE_DETAILS = {
    "name": "places/venue-1",
    "displayName": {"text": "Sainte-Chapelle"},
    "formattedAddress": "10 Bd du Palais, 75001 Paris",
    "rating": 4.7,
    "userRatingCount": 25000,
    "currentOpeningHours": {
        "openNow": True,
        "periods": [
            {"open": {"day": 6, "hour": 9, "minute": 0}, "close": {"day": 6, "hour": 19, "minute": 0}},
            {"open": {"day": 0, "hour": 10, "minute": 0}, "close": {"day": 0, "hour": 18, "minute": 0}},
        ],
    },
}


@pytest.mark.parametrize("hour", range(24))
def test_crowd_level_depends_only_on_hour(hour):
    level = crowd_level_for_hour(hour)
    if 11 <= hour <= 14 or 18 <= hour <= 20:
        assert level == CrowdLevel.HIGH
    elif 9 <= hour <= 17:
        assert level == CrowdLevel.MODERATE
    else:
        assert level == CrowdLevel.LOW


def test_simulated_wait_time_stays_below_thirty_minutes():
    signals = SimulatedVenueSignals(rng=random.Random(42))
    waits = [signals.wait_time_minutes() for _ in range(500)]
    assert all(0 <= w < 30 for w in waits)
    assert len(set(waits)) > 1


def test_tones():
    assert crowd_tone(CrowdLevel.LOW) == "green"
    assert crowd_tone(CrowdLevel.VERY_HIGH) == "red"
    assert crowd_tone("Unknown") == "gray"
    assert [wait_time_tone(m) for m in (0, 10, 11, 20, 21)] == ["green", "green", "yellow", "yellow", "red"]


def test_build_venue_data_picks_todays_period():
    signals = SimulatedVenueSignals(clock=lambda: SUNDAY_NOON, rng=random.Random(1))
    venue = build_venue_data("venue-1", VENUE_DETAILS, signals)

    assert venue.name == "Sainte-Chapelle"
    assert venue.crowd_level == CrowdLevel.HIGH
    assert venue.crowd_tone == "orange"
    assert venue.is_operational is True
    assert venue.today_hours["open"]["hour"] == 10
    assert venue.special_events == [] and venue.maintenance_alerts == []
    assert venue.last_updated == SUNDAY_NOON.isoformat()


def test_build_venue_data_without_opening_hours_is_not_operational():
    signals = SimulatedVenueSignals(clock=lambda: datetime(2024, 6, 16, 23, 0))
    venue = build_venue_data("venue-2", {"name": "places/venue-2"}, signals)
    assert venue.is_operational is False
    assert venue.today_hours is None
    assert venue.name == "places/venue-2"
    assert venue.crowd_level == CrowdLevel.LOW


def _monitor(fake, api_key="k", poll_interval_ms=300000):
    service = make_places_service(fake, api_key=api_key)
    config = AppConfig(places_api_key=api_key, poll_interval_ms=poll_interval_ms)
    return VenueStatusMonitor("venue-1", service, config,
                              signals=SimulatedVenueSignals(clock=lambda: SUNDAY_NOON))


def test_refresh_transitions_loading_to_ready():
    states = []
    monitor = _monitor(FakePlacesApi(details={"venue-1": VENUE_DETAILS}))
    monitor.on_change = lambda m: states.append(m.state)

    assert monitor.state == VenueStatusState.LOADING
    assert asyncio.run(monitor.refresh()) == VenueStatusState.READY
    assert states == [VenueStatusState.LOADING, VenueStatusState.READY]
    assert monitor.data.rating == 4.7


def test_refresh_failure_enters_error_and_retry_recovers():
    fake = FakePlacesApi(status_code=500, error_body={"error": {"code": 500}})
    monitor = _monitor(fake)

    assert asyncio.run(monitor.refresh()) == VenueStatusState.ERROR
    assert monitor.error

    fake.status_code = 200
    fake.details = {"venue-1": VENUE_DETAILS}
    assert asyncio.run(monitor.retry()) == VenueStatusState.READY
    assert monitor.error is None


def test_missing_credential_enters_error_without_request():
    fake = FakePlacesApi(details={"venue-1": VENUE_DETAILS})
    monitor = _monitor(fake, api_key="")
    assert asyncio.run(monitor.refresh()) == VenueStatusState.ERROR
    assert "not configured" in monitor.error
    assert fake.requests == []


def test_start_polls_on_interval_until_stopped():
    fake = FakePlacesApi(details={"venue-1": VENUE_DETAILS})
    monitor = _monitor(fake, poll_interval_ms=10)

    async def scenario():
        await monitor.start()
        assert monitor.is_running
        await asyncio.sleep(0.1)
        await monitor.stop()
        assert not monitor.is_running
        polled = len(fake.requests)
        await asyncio.sleep(0.05)
        return polled

    polled = asyncio.run(scenario())
    assert polled >= 3
    assert len(fake.requests) == polled


def test_non_json_details_enter_error_state():
    states = []
    monitor = _monitor(lambda request: httpx.Response(200, text="<html>captive portal</html>"))
    monitor.on_change = lambda m: states.append(m.state)

    assert asyncio.run(monitor.refresh()) == VenueStatusState.ERROR
    assert states == [VenueStatusState.LOADING, VenueStatusState.ERROR]
    assert monitor.error == "Places API returned invalid JSON"
    assert monitor.data is None


def test_malformed_details_enter_error_state():
    monitor = _monitor(FakePlacesApi(details={"venue-1": {**VENUE_DETAILS, "rating": "n/a"}}))
    assert asyncio.run(monitor.refresh()) == VenueStatusState.ERROR
    assert monitor.error == "Places API returned malformed venue details"


def test_transport_failure_enters_error_state():
    def refuse_connection(request):
        raise httpx.ConnectError("connection refused", request=request)

    monitor = _monitor(refuse_connection)
    assert asyncio.run(monitor.refresh()) == VenueStatusState.ERROR
    assert monitor.error == "Places API request failed"


class GatedVenueApi:
    """Answers immediately until gated, then holds each request until released."""

    def __init__(self):
        self.gated = False
        self.entered = None
        self.release = None
        self.completed = 0

    async def __call__(self, request):
        if self.gated:
            self.entered.set()
            await self.release.wait()
        self.completed += 1
        return httpx.Response(200, json=VENUE_DETAILS)


def test_stop_during_fetch_leaves_monitor_untouched():
    api = GatedVenueApi()
    monitor = _monitor(api, poll_interval_ms=10)
    states = []

    async def scenario():
        api.entered = asyncio.Event()
        api.release = asyncio.Event()
        await monitor.start()
        snapshot = monitor.data

        api.gated = True
        await asyncio.wait_for(api.entered.wait(), timeout=1)
        await monitor.stop()
        state_at_stop = monitor.state
        monitor.on_change = lambda m: states.append(m.state)

        api.release.set()
        await asyncio.sleep(0.05)
        return snapshot, state_at_stop

    snapshot, state_at_stop = asyncio.run(scenario())
    assert snapshot is not None
    assert monitor.data is snapshot
    assert monitor.state == state_at_stop == VenueStatusState.LOADING
    assert states == []
    assert not monitor.is_running
