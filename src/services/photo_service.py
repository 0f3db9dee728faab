"""
Photo URL strategies for place cards and map popups.

Places API v1 identifies a photo by its resource name,
``places/{place_id}/photos/{photo_reference}``. Older records carry a bare
legacy ``photo_reference`` instead. Each strategy turns whatever the stored
record holds into a media URL, or an empty string when it cannot.
"""

import logging
from typing import Optional, Protocol
from urllib.parse import urlencode

from src.utils.config import AppConfig

LEGACY_PHOTO_URL = "https://maps.googleapis.com/maps/api/place/photo"


class PhotoUrlStrategy(Protocol):
    def __call__(self, photo_reference: str) -> str: ...


class ResourceNamePhotoUrl:
    """Media URL for v1 resource names, legacy photo endpoint for anything else."""

    def __init__(self, config: AppConfig, max_height_px: int = 400, legacy_max_width: int = 400):
        self.config = config
        self.max_height_px = max_height_px
        self.legacy_max_width = legacy_max_width
        self.logger = logging.getLogger(__name__)

    def __call__(self, photo_reference: str) -> str:
        if not photo_reference:
            return ""
        if not self.config.has_places_credential:
            self.logger.error("API key not found")
            return ""

        if photo_reference.startswith("places/"):
            params = urlencode({"key": self.config.places_api_key, "maxHeightPx": self.max_height_px})
            return f"{self.config.places_base_url}/{photo_reference}/media?{params}"

        params = urlencode({
            "maxwidth": self.legacy_max_width,
            "photo_reference": photo_reference,
            "key": self.config.places_api_key,
        })
        return f"{LEGACY_PHOTO_URL}?{params}"


class SegmentedPhotoUrl:
    """Rebuilds the media URL from the place id and photo reference segments.

    Anything that is not exactly four ``/``-separated segments yields ``""``.
    """

    EXPECTED_SEGMENTS = 4

    def __init__(self, config: AppConfig, max_height_px: int = 400, max_width_px: int = 400):
        self.config = config
        self.max_height_px = max_height_px
        self.max_width_px = max_width_px
        self.logger = logging.getLogger(__name__)

    def __call__(self, photo_reference: str) -> str:
        if not photo_reference:
            return ""
        segments = photo_reference.split("/")
        if len(segments) != self.EXPECTED_SEGMENTS:
            self.logger.debug(f"Unexpected photo resource name: {photo_reference}")
            return ""
        if not self.config.has_places_credential:
            self.logger.error("API key not found")
            return ""

        place_id, photo_id = segments[1], segments[3]
        params = urlencode({
            "maxHeightPx": self.max_height_px,
            "maxWidthPx": self.max_width_px,
            "key": self.config.places_api_key,
        })
        return f"{self.config.places_base_url}/places/{place_id}/photos/{photo_id}/media?{params}"


PHOTO_URL_STRATEGIES = {
    "resource": ResourceNamePhotoUrl,
    "segmented": SegmentedPhotoUrl,
}


def get_photo_url_strategy(name: str, config: AppConfig, max_height_px: Optional[int] = None) -> PhotoUrlStrategy:
    """Build a strategy by name ("resource" or "segmented")."""
    try:
        strategy_cls = PHOTO_URL_STRATEGIES[name]
    except KeyError:
        raise ValueError(f"Unknown photo URL strategy: {name}") from None
    if max_height_px is not None:
        return strategy_cls(config, max_height_px=max_height_px)
    return strategy_cls(config)
