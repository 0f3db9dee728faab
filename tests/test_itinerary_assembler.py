import pytest

from conftest import make_place
from src.models.place_models import Place
from src.services.itinerary_assembler import assemble_trip

ATTRACTION_SLOTS = [("day1", "morning", 0), ("day1", "afternoon", 2), ("day2", "morning", 4), ("day2", "afternoon", 6)]
RESTAURANT_SLOTS = [("day1", "evening", 0), ("day2", "evening", 2)]


def _places(prefix, count):
    return [make_place(f"{prefix}-{i}", f"{prefix} {i}") for i in range(count)]


def _slot(trip, day, slot):
    return getattr(getattr(trip, day), slot)


@pytest.mark.parametrize("attraction_count", [0, 1, 2, 3, 5, 8, 12])
@pytest.mark.parametrize("restaurant_count", [0, 1, 3, 4, 9])
def test_slot_sizes_follow_fixed_windows(attraction_count, restaurant_count):
    trip = assemble_trip("Lyon", _places("a", attraction_count), _places("r", restaurant_count))

    for day, slot, offset in ATTRACTION_SLOTS:
        assert len(_slot(trip, day, slot).places) == min(2, max(0, attraction_count - offset))
    for day, slot, offset in RESTAURANT_SLOTS:
        assert len(_slot(trip, day, slot).places) == min(2, max(0, restaurant_count - offset))


def test_slots_are_disjoint_in_source_order():
    trip = assemble_trip("Lyon", _places("a", 10), _places("r", 10))
    attraction_ids = [p.id for day, slot, _ in ATTRACTION_SLOTS for p in _slot(trip, day, slot).places]
    restaurant_ids = [p.id for day, slot, _ in RESTAURANT_SLOTS for p in _slot(trip, day, slot).places]
    assert attraction_ids == [f"a-{i}" for i in range(8)]
    assert restaurant_ids == [f"r-{i}" for i in range(4)]


def test_slot_titles_and_descriptions():
    trip = assemble_trip("Nice", [], [])
    assert trip.city == "Nice"
    assert trip.day1.morning.title == "Morning Exploration"
    assert trip.day1.afternoon.title == "Afternoon Activities"
    assert trip.day1.evening.title == "Evening Entertainment"
    assert trip.day2.morning.title == "Morning Activities"
    assert trip.day2.afternoon.title == "Afternoon Exploration"
    assert trip.day2.evening.description == "End your trip with memorable experiences"


def test_accepts_place_models_and_keeps_duplicates():
    louvre = Place.model_validate(make_place("louvre", "Louvre"))
    trip = assemble_trip("Paris", [louvre, louvre, louvre], [])
    assert trip.day1.morning.places == [louvre, louvre]
    assert trip.day1.afternoon.places == [louvre]
