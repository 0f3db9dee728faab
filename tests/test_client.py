import asyncio

import httpx
import pytest

from conftest import FakePlacesApi, make_places_service
from src.api.main import create_app
from src.client import cli
from src.client.api_client import BackendError, TripPlannerClient
from src.services.recommendation_store import JsonFileStorage, RecommendationStore
from src.utils.config import Settings


def asgi_client(fake, api_key="k"):
    app = create_app(
        settings=Settings(GOOGLE_PLACES_API_KEY=api_key),
        places_service=make_places_service(fake, api_key=api_key),
    )
    transport = httpx.ASGITransport(app=app)
    return TripPlannerClient("http://testserver", http_client=httpx.AsyncClient(transport=transport))


def test_client_recommend_trip_parses_recommendation(fake_api):
    recommendation = asyncio.run(asgi_client(fake_api).recommend_trip("Paris", "medium", "culture"))
    assert recommendation.city == "Paris"
    assert len(recommendation.day1.morning.places) == 2
    assert recommendation.day1.morning.places[0].title == "Attraction 0"


def test_client_raises_backend_error_with_envelope():
    fake = FakePlacesApi(status_code=429, error_body={"error": {"code": 429}})
    with pytest.raises(BackendError) as exc_info:
        asyncio.run(asgi_client(fake).search_cities("Paris"))
    assert str(exc_info.value) == "Failed to fetch cities"
    assert exc_info.value.status_code == 500
    assert exc_info.value.details == {"error": {"code": 429}}


def test_cli_results_without_stored_trip(tmp_path, capsys):
    exit_code = cli.main(["--store", str(tmp_path / "storage.json"), "results"])
    assert exit_code == 1
    assert "No trip recommendations found" in capsys.readouterr().out


def test_cli_plan_then_results(tmp_path, capsys, monkeypatch, fake_api):
    monkeypatch.setattr(cli, "TripPlannerClient", lambda base_url: asgi_client(fake_api))
    store_path = tmp_path / "storage.json"

    assert cli.main(["--store", str(store_path), "plan", "Paris"]) == 0
    assert "Your Perfect Trip to Paris" in capsys.readouterr().out
    assert RecommendationStore(JsonFileStorage(store_path)).load().city == "Paris"

    assert cli.main(["--store", str(store_path), "results", "--itinerary"]) == 0
    out = capsys.readouterr().out
    assert "Morning Exploration" in out
    assert "09:00  Attraction 0 (1 hour)" in out


def test_cli_map_lists_markers(tmp_path, capsys, monkeypatch, fake_api):
    monkeypatch.setattr(cli, "TripPlannerClient", lambda base_url: asgi_client(fake_api))
    store_path = str(tmp_path / "storage.json")
    cli.main(["--store", store_path, "plan", "Paris"])
    capsys.readouterr()

    assert cli.main(["--store", store_path, "map"]) == 0
    out = capsys.readouterr().out
    assert "[attr-0] Attraction 0" in out
    assert "[rest-0] Restaurant 0" in out


def test_client_venue_status_parses_snapshot():
    fake = FakePlacesApi(details={"venue-1": {
        "id": "venue-1",
        "displayName": {"text": "Louvre"},
        "currentOpeningHours": {"openNow": False},
    }})
    venue = asyncio.run(asgi_client(fake).venue_status("venue-1"))
    assert venue.venue_id == "venue-1"
    assert venue.name == "Louvre"
    assert venue.is_operational is False
    assert venue.simulated is True
    assert 0 <= venue.current_wait_time < 30


def test_cli_reports_corrupt_store(tmp_path, capsys, monkeypatch, fake_api):
    monkeypatch.setattr(cli, "TripPlannerClient", lambda base_url: asgi_client(fake_api))
    store_path = tmp_path / "storage.json"
    store_path.write_text("{truncated")

    assert cli.main(["--store", str(store_path), "results"]) == 1
    assert "Failed to load trip recommendations" in capsys.readouterr().out

    assert cli.main(["--store", str(store_path), "plan", "Paris"]) == 1
    assert "Failed to load trip recommendations" in capsys.readouterr().out
    assert store_path.read_text() == "{truncated"
