"""
Venue status polling.

The places directory has no live occupancy data, so crowd level and wait time
come from ``SimulatedVenueSignals``: a fixed hour-of-day table and a random
number. Neither reflects the venue being polled.
"""

import asyncio
import logging
import random
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from src.models.view_models import CrowdLevel, VenueData
from src.services.google_places_service import GooglePlacesService, PlacesApiError, PlacesServiceError
from src.utils.config import AppConfig

VENUE_FIELD_MASK = "id,name,displayName,rating,userRatingCount,formattedAddress,photos,currentOpeningHours"

MAX_SIMULATED_WAIT_MINUTES = 30

CROWD_TONES = {
    CrowdLevel.LOW: "green",
    CrowdLevel.MODERATE: "yellow",
    CrowdLevel.HIGH: "orange",
    CrowdLevel.VERY_HIGH: "red",
}


def crowd_level_for_hour(hour: int) -> CrowdLevel:
    if 11 <= hour <= 14 or 18 <= hour <= 20:
        return CrowdLevel.HIGH
    if 9 <= hour <= 17:
        return CrowdLevel.MODERATE
    return CrowdLevel.LOW


def crowd_tone(level: Any) -> str:
    return CROWD_TONES.get(level, "gray")


def wait_time_tone(minutes: int) -> str:
    if minutes <= 10:
        return "green"
    if minutes <= 20:
        return "yellow"
    return "red"


def js_weekday(moment: datetime) -> int:
    """Weekday numbered from Sunday = 0, as opening-hours periods use"""
    return moment.isoweekday() % 7


class SimulatedVenueSignals:
    """Placeholder crowd and wait figures derived from the clock and an RNG."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now, rng: Optional[random.Random] = None):
        self.clock = clock
        self.rng = rng or random.Random()

    def now(self) -> datetime:
        return self.clock()

    def crowd_level(self, moment: Optional[datetime] = None) -> CrowdLevel:
        return crowd_level_for_hour((moment or self.now()).hour)

    def wait_time_minutes(self) -> int:
        return self.rng.randrange(MAX_SIMULATED_WAIT_MINUTES)


def build_venue_data(venue_id: str, details: Dict[str, Any], signals: SimulatedVenueSignals) -> VenueData:
    now = signals.now()
    opening_hours = details.get("currentOpeningHours") or None
    today_hours = None
    if opening_hours:
        today = js_weekday(now)
        for period in opening_hours.get("periods") or []:
            if (period.get("open") or {}).get("day") == today:
                today_hours = period
                break

    display_name = (details.get("displayName") or {}).get("text")
    wait_minutes = signals.wait_time_minutes()
    level = signals.crowd_level(now)
    return VenueData(
        venue_id=venue_id,
        name=display_name or details.get("name"),
        crowd_level=level,
        current_wait_time=wait_minutes,
        last_updated=now.isoformat(),
        is_operational=bool((opening_hours or {}).get("openNow", False)),
        rating=details.get("rating"),
        user_rating_count=details.get("userRatingCount"),
        formatted_address=details.get("formattedAddress"),
        photos=details.get("photos") or [],
        current_opening_hours=opening_hours,
        today_hours=today_hours,
        special_events=[],
        maintenance_alerts=[],
        crowd_tone=crowd_tone(level),
        wait_tone=wait_time_tone(wait_minutes),
    )


async def fetch_venue_status(venue_id: str, places_service: GooglePlacesService,
                             signals: Optional[SimulatedVenueSignals] = None) -> VenueData:
    details = await places_service.get_place_details(venue_id, VENUE_FIELD_MASK)
    try:
        return build_venue_data(venue_id, details, signals or SimulatedVenueSignals())
    except (ValidationError, AttributeError, TypeError) as e:
        raise PlacesApiError("Places API returned malformed venue details", details=str(e)) from e


class VenueStatusState(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class VenueStatusMonitor:
    """Polls one venue on a fixed interval and keeps the latest snapshot."""

    def __init__(self, venue_id: str, places_service: GooglePlacesService, config: AppConfig,
                 signals: Optional[SimulatedVenueSignals] = None,
                 on_change: Optional[Callable[["VenueStatusMonitor"], None]] = None):
        self.venue_id = venue_id
        self.places_service = places_service
        self.config = config
        self.signals = signals or SimulatedVenueSignals()
        self.on_change = on_change
        self.logger = logging.getLogger(__name__)

        self.state = VenueStatusState.LOADING
        self.data: Optional[VenueData] = None
        self.error: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def poll_interval_seconds(self) -> float:
        return self.config.poll_interval_ms / 1000

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _set_state(self, state: VenueStatusState):
        self.state = state
        if self.on_change:
            self.on_change(self)

    async def refresh(self) -> VenueStatusState:
        self.error = None
        self._set_state(VenueStatusState.LOADING)
        try:
            self.data = await fetch_venue_status(self.venue_id, self.places_service, self.signals)
        except PlacesServiceError as e:
            self.error = str(e) or "Failed to fetch venue data"
            self.logger.error(f"Error fetching venue data for {self.venue_id}: {self.error}")
            self._set_state(VenueStatusState.ERROR)
        else:
            self._set_state(VenueStatusState.READY)
        return self.state

    # Manual retry control shown in the error state
    retry = refresh

    async def start(self):
        """Fetch immediately, then keep refreshing every poll interval."""
        await self.stop()
        await self.refresh()
        self._task = asyncio.create_task(self._poll())

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _poll(self):
        while True:
            await asyncio.sleep(self.poll_interval_seconds)
            await self.refresh()
