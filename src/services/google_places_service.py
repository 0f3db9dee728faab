from typing import Any, Dict, List, Optional
import logging
import httpx

from src.utils.config import AppConfig

CITY_FIELD_MASK = "places.displayName,places.formattedAddress,places.location"

PLACE_SEARCH_FIELD_MASK = (
    "places.displayName,places.formattedAddress,places.rating,"
    "places.userRatingCount,places.primaryTypeDisplayName,"
    "places.regularOpeningHours,places.priceLevel,places.photos,"
    "places.websiteUri,places.phoneNumber,places.location"
)

RECOMMEND_FIELD_MASK = (
    "places.id,places.displayName,places.formattedAddress,places.rating,"
    "places.userRatingCount,places.photos,places.location"
)


class PlacesServiceError(Exception):
    """Base class for failures talking to the places directory."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.details = details


class MissingCredentialError(PlacesServiceError):
    def __init__(self):
        super().__init__("Google Places API key is not configured")


class PlacesApiError(PlacesServiceError):
    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message, details)
        self.status_code = status_code


class GooglePlacesService:
    """Thin gateway over the Places API v1 text search and details endpoints."""

    def __init__(self, config: AppConfig, http_client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.api_calls_made = 0
        # Shared async HTTP client with connection pooling (reused across requests)
        self.http_client = http_client or httpx.AsyncClient(
            timeout=config.request_timeout_seconds,
            limits=httpx.Limits(max_keepalive_connections=20, max_connections=50)
        )

    async def close(self):
        """Close HTTP client connections."""
        await self.http_client.aclose()

    def _headers(self, field_mask: str) -> Dict[str, str]:
        if not self.config.has_places_credential:
            raise MissingCredentialError()
        return {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self.config.places_api_key,
            "X-Goog-FieldMask": field_mask,
        }

    async def _send(self, method: str, url: str, headers: Dict[str, str], body: Optional[Dict] = None) -> Dict[str, Any]:
        try:
            resp = await self.http_client.request(method, url, headers=headers, json=body)
        except httpx.HTTPError as e:
            self.logger.error(f"Places API transport error: {str(e)}")
            raise PlacesApiError("Places API request failed", details=str(e)) from e
        self.api_calls_made += 1

        if resp.status_code != 200:
            try:
                details = resp.json()
            except ValueError:
                details = resp.text
            self.logger.error(f"Places API error: {resp.status_code} {resp.text}")
            raise PlacesApiError(
                f"Places API returned {resp.status_code}",
                status_code=resp.status_code,
                details=details,
            )
        try:
            data = resp.json()
        except ValueError:
            self.logger.error(f"Places API returned invalid JSON: {resp.text[:200]}")
            raise PlacesApiError(
                "Places API returned invalid JSON",
                status_code=resp.status_code,
                details=resp.text,
            )
        if not isinstance(data, dict):
            raise PlacesApiError(
                "Places API returned an unexpected payload",
                status_code=resp.status_code,
                details=data,
            )
        return data

    async def search_text(self, text_query: str, field_mask: str,
                          language_code: Optional[str] = None,
                          max_result_count: Optional[int] = None) -> Dict[str, Any]:
        """POST places:searchText and return the upstream JSON untouched."""
        headers = self._headers(field_mask)
        body: Dict[str, Any] = {"textQuery": text_query}
        if language_code:
            body["languageCode"] = language_code
        if max_result_count:
            body["maxResultCount"] = max_result_count

        url = f"{self.config.places_base_url}/places:searchText"
        return await self._send("POST", url, headers, body)

    async def search_cities(self, city_name: str) -> List[Dict[str, Any]]:
        self.logger.info(f"[Cities API] Searching for city: {city_name}")
        data = await self.search_text(
            text_query=f"city of {city_name}, {self.config.city_search_region}",
            field_mask=CITY_FIELD_MASK,
            language_code=self.config.language_code,
            max_result_count=5,
        )
        places = data.get("places") or []
        self.logger.info(f"[Cities API] Found {len(places)} cities")
        return places

    async def search_places(self, city_name: str, place_type: str) -> Dict[str, Any]:
        self.logger.info(f"[Places API] Searching for {place_type} in {city_name}")
        data = await self.search_text(
            text_query=f"{place_type} in {city_name}",
            field_mask=PLACE_SEARCH_FIELD_MASK,
            max_result_count=10,
        )
        self.logger.info(f"[Places API] Found {len(data.get('places') or [])} places")
        return data

    async def get_place_details(self, place_id: str, field_mask: str) -> Dict[str, Any]:
        headers = self._headers(field_mask)
        url = f"{self.config.places_base_url}/places/{place_id}"
        return await self._send("GET", url, headers)

    def get_api_calls_made(self) -> int:
        """Get the number of upstream calls issued by this service"""
        return self.api_calls_made
