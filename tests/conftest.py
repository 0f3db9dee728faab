import json

import httpx
import pytest

from src.services.google_places_service import GooglePlacesService
from src.utils.config import AppConfig

TEST_API_KEY = "test-places-key"


def make_place(place_id, name, lat=48.86, lng=2.35, rating=4.5, reviews=1200, photo=True):
    place = {
        "id": place_id,
        "displayName": {"text": name, "languageCode": "en"},
        "formattedAddress": f"{name} address, Paris, France",
        "rating": rating,
        "userRatingCount": reviews,
        "location": {"latitude": lat, "longitude": lng},
    }
    if photo:
        place["photos"] = [{
            "name": f"places/{place_id}/photos/photo-{place_id}",
            "widthPx": 1200,
            "heightPx": 800,
            "authorAttributions": [{"displayName": "Jane Doe", "uri": "https://example.com/jane"}],
        }]
    return place


class FakePlacesApi:
    """Stands in for places.googleapis.com behind an httpx.MockTransport."""

    def __init__(self, search_results=None, details=None, status_code=200, error_body=None):
        # textQuery prefix -> list of places (None omits the "places" key)
        self.search_results = search_results or {}
        self.details = details or {}
        self.status_code = status_code
        self.error_body = error_body
        self.requests = []

    def bodies(self):
        return [json.loads(r.content) for r in self.requests if r.method == "POST"]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json=self.error_body)

        if request.method == "POST" and request.url.path.endswith("places:searchText"):
            query = json.loads(request.content)["textQuery"]
            for prefix, places in self.search_results.items():
                if query.startswith(prefix):
                    return httpx.Response(200, json={} if places is None else {"places": places})
            return httpx.Response(200, json={})

        place_id = request.url.path.rsplit("/", 1)[-1]
        if place_id in self.details:
            return httpx.Response(200, json=self.details[place_id])
        return httpx.Response(404, json={"error": {"code": 404, "status": "NOT_FOUND"}})


def make_places_service(fake, api_key=TEST_API_KEY, **config_overrides):
    config = AppConfig(places_api_key=api_key, **config_overrides)
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake))
    return GooglePlacesService(config, http_client=client)


@pytest.fixture
def attractions():
    return [make_place(f"attr-{i}", f"Attraction {i}", lat=48.85 + i * 0.01) for i in range(3)]


@pytest.fixture
def restaurants():
    return [make_place("rest-0", "Restaurant 0", lat=48.87)]


@pytest.fixture
def fake_api(attractions, restaurants):
    return FakePlacesApi(search_results={
        "tourist attractions in": attractions,
        "restaurants in": restaurants,
        "city of": [make_place("city-paris", "Paris", photo=False)],
        "museums in": [make_place("museum-1", "Louvre")],
    })
