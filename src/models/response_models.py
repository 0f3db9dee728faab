from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any

from src.models.place_models import Place


class TimeSlot(BaseModel):
    title: str
    description: str
    places: List[Place] = Field(default_factory=list)

    model_config = {"extra": "allow"}


class DayPlan(BaseModel):
    morning: TimeSlot
    afternoon: TimeSlot
    evening: TimeSlot

    model_config = {"extra": "allow"}

    def slots(self):
        """Yield (slot_name, slot) in chronological order"""
        yield "morning", self.morning
        yield "afternoon", self.afternoon
        yield "evening", self.evening


class TripRecommendation(BaseModel):
    city: str
    day1: DayPlan
    day2: DayPlan

    model_config = {"extra": "allow"}

    def days(self):
        yield 1, self.day1
        yield 2, self.day2

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class ErrorEnvelope(BaseModel):
    error: str
    details: Optional[Any] = None
