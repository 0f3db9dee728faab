from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any
from enum import Enum


class ItemType(str, Enum):
    ACTIVITY = "activity"
    TRANSPORTATION = "transportation"
    REST = "rest"
    MEAL = "meal"
    ACCOMMODATION = "accommodation"


class ItineraryItem(BaseModel):
    id: str
    title: str
    time: str  # "HH:MM"
    duration: int = 60  # minutes
    type: ItemType = ItemType.ACTIVITY
    location: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    cost: float = 0
    category: str = "activity"
    coordinates: Optional[Dict[str, float]] = None


class PlaceCard(BaseModel):
    place_id: Optional[str] = None
    name: Optional[str] = None
    address: Optional[str] = None
    rating: Optional[float] = None
    user_rating_count: Optional[int] = None
    photo_url: str = ""
    photo_attribution: Optional[str] = None
    has_photo: bool = False


class SlotView(BaseModel):
    key: str  # morning / afternoon / evening
    title: str
    description: str
    places: List[PlaceCard] = Field(default_factory=list)


class DayView(BaseModel):
    day_number: int
    slots: List[SlotView] = Field(default_factory=list)


class ResultsStatus(str, Enum):
    READY = "ready"
    ERROR = "error"


class ResultsView(BaseModel):
    status: ResultsStatus
    city: Optional[str] = None
    heading: Optional[str] = None
    subtitle: Optional[str] = None
    days: List[DayView] = Field(default_factory=list)
    itinerary: List[ItineraryItem] = Field(default_factory=list)
    error: Optional[str] = None
    action_label: str = "Plan New Trip"
    action_href: str = "/"


class CrowdLevel(str, Enum):
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
    VERY_HIGH = "Very High"


class VenueData(BaseModel):
    """Venue snapshot for one poll cycle. Crowd level and wait time are simulated."""
    venue_id: str
    name: Optional[str] = None
    crowd_level: CrowdLevel
    current_wait_time: Optional[int] = None  # minutes
    last_updated: str
    is_operational: bool = False
    rating: Optional[float] = None
    user_rating_count: Optional[int] = None
    formatted_address: Optional[str] = None
    photos: List[Dict[str, Any]] = Field(default_factory=list)
    current_opening_hours: Optional[Dict[str, Any]] = None
    today_hours: Optional[Dict[str, Any]] = None
    special_events: List[str] = Field(default_factory=list)
    maintenance_alerts: List[str] = Field(default_factory=list)
    crowd_tone: str = "gray"
    wait_tone: Optional[str] = None
    simulated: bool = True


class MapPoint(BaseModel):
    id: str
    title: str
    lat: float
    lng: float
    place_id: Optional[str] = None
