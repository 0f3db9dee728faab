import asyncio
import logging

from pydantic import ValidationError

from src.models.place_models import SearchCategory
from src.models.response_models import TripRecommendation
from src.services.google_places_service import GooglePlacesService, PlacesApiError, RECOMMEND_FIELD_MASK
from src.services.itinerary_assembler import assemble_trip


class TripRecommendationService:
    """Fetches attractions and restaurants for a city and lays them out over two days."""

    def __init__(self, places_service: GooglePlacesService):
        self.places_service = places_service
        self.logger = logging.getLogger(__name__)

    async def _search(self, category: SearchCategory, city_name: str):
        data = await self.places_service.search_text(
            text_query=f"{category.value} in {city_name}",
            field_mask=RECOMMEND_FIELD_MASK,
            language_code=self.places_service.config.language_code,
        )
        return data.get("places") or []

    async def recommend_trip(self, city_name: str, budget: str = "", trip_type: str = "") -> TripRecommendation:
        self.logger.info(f"[Recommendations] Generating trip for {city_name} ({budget}, {trip_type})")

        attractions, restaurants = await asyncio.gather(
            self._search(SearchCategory.ATTRACTIONS, city_name),
            self._search(SearchCategory.RESTAURANTS, city_name),
        )
        self.logger.info(
            f"[Recommendations] Found {len(attractions)} attractions and {len(restaurants)} restaurants"
        )
        try:
            return assemble_trip(city_name, attractions, restaurants)
        except ValidationError as e:
            self.logger.error(f"[Recommendations] Malformed place in upstream response: {str(e)}")
            raise PlacesApiError("Places API returned malformed places", details=str(e)) from e
