import logging
import time
from typing import List, Optional

from src.models.place_models import Place
from src.models.response_models import TripRecommendation, TimeSlot
from src.models.view_models import (
    DayView, ItineraryItem, PlaceCard, ResultsStatus, ResultsView, SlotView,
)
from src.services.photo_service import PhotoUrlStrategy
from src.services.recommendation_store import (
    RecommendationNotFoundError, RecommendationParseError, RecommendationStore,
)

SLOT_TIMES = {
    "morning": "09:00",
    "afternoon": "14:00",
    "evening": "19:00",
}

DEFAULT_ITEM_DURATION_MINUTES = 60


def _fallback_item_id(index: int) -> str:
    return f"place-{int(time.time() * 1000)}-{index}"


def transform_places(places: List[Place], slot_name: str) -> List[ItineraryItem]:
    items = []
    for index, place in enumerate(places):
        coordinates = None
        if place.location is not None:
            coordinates = {"lat": place.location.latitude, "lng": place.location.longitude}
        items.append(ItineraryItem(
            id=place.id or _fallback_item_id(index),
            title=place.title or "Unnamed Place",
            time=SLOT_TIMES[slot_name],
            duration=DEFAULT_ITEM_DURATION_MINUTES,
            location=place.title,
            address=place.formatted_address,
            cost=0,
            category="activity",
            coordinates=coordinates,
        ))
    return items


def transform_recommendation_to_itinerary(recommendation: Optional[TripRecommendation]) -> List[ItineraryItem]:
    """Flatten both days into one list of timed items, in slot order."""
    if recommendation is None:
        return []
    items: List[ItineraryItem] = []
    for _, day in recommendation.days():
        for slot_name, slot in day.slots():
            items.extend(transform_places(slot.places, slot_name))
    return items


class ResultsRenderer:
    """Builds the results view from the stored recommendation."""

    def __init__(self, store: RecommendationStore, photo_url_strategy: PhotoUrlStrategy):
        self.store = store
        self.photo_url_strategy = photo_url_strategy
        self.logger = logging.getLogger(__name__)

    def render(self) -> ResultsView:
        try:
            recommendation = self.store.load()
        except (RecommendationNotFoundError, RecommendationParseError) as e:
            self.logger.error(f"Error loading recommendations: {e}")
            return ResultsView(status=ResultsStatus.ERROR, error=str(e))

        return ResultsView(
            status=ResultsStatus.READY,
            city=recommendation.city,
            heading=f"Your Perfect Trip to {recommendation.city}",
            subtitle="A carefully curated 2-day itinerary just for you",
            days=[
                DayView(day_number=number, slots=[
                    self._render_slot(slot_name, slot) for slot_name, slot in day.slots()
                ])
                for number, day in recommendation.days()
            ],
            itinerary=transform_recommendation_to_itinerary(recommendation),
        )

    def _render_slot(self, slot_name: str, slot: TimeSlot) -> SlotView:
        return SlotView(
            key=slot_name,
            title=slot.title,
            description=slot.description,
            places=[self.render_place_card(place) for place in slot.places],
        )

    def render_place_card(self, place: Place) -> PlaceCard:
        photo = place.photos[0] if place.photos else None
        attribution = None
        if photo and photo.author_attributions:
            attribution = photo.author_attributions[0].label
        return PlaceCard(
            place_id=place.id,
            name=place.title,
            address=place.formatted_address,
            rating=place.rating,
            user_rating_count=place.user_rating_count,
            photo_url=self.photo_url_strategy(photo.name) if photo else "",
            photo_attribution=attribution,
            has_photo=photo is not None,
        )
