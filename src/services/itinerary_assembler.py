"""
Positional two-day itinerary assembly.

Attractions fill the morning and afternoon slots of both days two at a time,
restaurants fill the evenings. Nothing is scored or reordered; short inputs
leave later slots empty.
"""

from typing import Any, Dict, List, Sequence, Union

from src.models.place_models import Place
from src.models.response_models import DayPlan, TimeSlot, TripRecommendation

PLACES_PER_SLOT = 2

# (day, slot, source, offset, title, description)
SLOT_LAYOUT = [
    ("day1", "morning", "attractions", 0, "Morning Exploration",
     "Start your day exploring the city's main attractions"),
    ("day1", "afternoon", "attractions", 2, "Afternoon Activities",
     "Continue discovering the city's highlights"),
    ("day1", "evening", "restaurants", 0, "Evening Entertainment",
     "Enjoy dinner and evening activities"),
    ("day2", "morning", "attractions", 4, "Morning Activities",
     "Start your second day with local experiences"),
    ("day2", "afternoon", "attractions", 6, "Afternoon Exploration",
     "More city highlights and activities"),
    ("day2", "evening", "restaurants", 2, "Farewell Evening",
     "End your trip with memorable experiences"),
]

PlaceLike = Union[Place, Dict[str, Any]]


def _as_places(items: Sequence[PlaceLike]) -> List[Place]:
    return [item if isinstance(item, Place) else Place.model_validate(item) for item in items]


def assemble_trip(city: str, attractions: Sequence[PlaceLike],
                  restaurants: Sequence[PlaceLike]) -> TripRecommendation:
    sources = {
        "attractions": _as_places(attractions),
        "restaurants": _as_places(restaurants),
    }

    days: Dict[str, Dict[str, TimeSlot]] = {"day1": {}, "day2": {}}
    for day, slot, source, offset, title, description in SLOT_LAYOUT:
        days[day][slot] = TimeSlot(
            title=title,
            description=description,
            places=sources[source][offset:offset + PLACES_PER_SLOT],
        )

    return TripRecommendation(
        city=city,
        day1=DayPlan(**days["day1"]),
        day2=DayPlan(**days["day2"]),
    )
