import logging
from typing import Any, Dict, List, Optional

import httpx

from src.models.response_models import TripRecommendation
from src.models.view_models import VenueData


class BackendError(Exception):
    """The trip planner backend answered with its error envelope."""

    def __init__(self, message: str, status_code: int, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class TripPlannerClient:
    """HTTP client for the trip planner backend."""

    def __init__(self, base_url: str, http_client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self.logger = logging.getLogger(__name__)
        self.http_client = http_client or httpx.AsyncClient()

    async def close(self):
        await self.http_client.aclose()

    async def _request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Any:
        resp = await self.http_client.request(method, f"{self.base_url}{path}", json=body)
        try:
            data = resp.json()
        except ValueError:
            data = resp.text
        if resp.status_code != 200:
            message = data.get("error", "Request failed") if isinstance(data, dict) else "Request failed"
            details = data.get("details") if isinstance(data, dict) else data
            self.logger.error(f"{method} {path} failed: {resp.status_code} {message}")
            raise BackendError(message, resp.status_code, details)
        return data

    async def search_cities(self, city_name: str) -> List[Dict[str, Any]]:
        data = await self._request("POST", "/api/cities/search", {"cityName": city_name})
        return data.get("places", [])

    async def search_places(self, city_name: str, place_type: str) -> Dict[str, Any]:
        return await self._request("POST", "/api/places/search", {"cityName": city_name, "type": place_type})

    async def recommend_trip(self, city_name: str, budget: str, trip_type: str) -> TripRecommendation:
        data = await self._request("POST", "/api/trips/recommend", {
            "cityName": city_name,
            "budget": budget,
            "tripType": trip_type,
        })
        return TripRecommendation.model_validate(data)

    async def venue_status(self, place_id: str) -> VenueData:
        data = await self._request("GET", f"/api/venues/{place_id}/status")
        return VenueData.model_validate(data)
