from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any
from enum import Enum


class SearchCategory(str, Enum):
    ATTRACTIONS = "tourist attractions"
    RESTAURANTS = "restaurants"


# Upstream records keep unknown fields so they serialise back unchanged
_UPSTREAM_CONFIG = {"populate_by_name": True, "extra": "allow"}


class LocalizedText(BaseModel):
    text: Optional[str] = None
    language_code: Optional[str] = Field(default=None, alias="languageCode")

    model_config = _UPSTREAM_CONFIG


class LatLng(BaseModel):
    latitude: float
    longitude: float

    model_config = _UPSTREAM_CONFIG


class AuthorAttribution(BaseModel):
    display_name: Optional[str] = Field(default=None, alias="displayName")
    name: Optional[str] = None
    uri: Optional[str] = None

    model_config = _UPSTREAM_CONFIG

    @property
    def label(self) -> Optional[str]:
        return self.display_name or self.name


class PlacePhoto(BaseModel):
    name: str = ""
    width_px: Optional[int] = Field(default=None, alias="widthPx")
    height_px: Optional[int] = Field(default=None, alias="heightPx")
    author_attributions: List[AuthorAttribution] = Field(default_factory=list, alias="authorAttributions")

    model_config = _UPSTREAM_CONFIG


class Place(BaseModel):
    """A Places API v1 record, immutable as received."""
    id: Optional[str] = None
    name: Optional[str] = None  # resource name, "places/{id}"
    display_name: Optional[LocalizedText] = Field(default=None, alias="displayName")
    formatted_address: Optional[str] = Field(default=None, alias="formattedAddress")
    rating: Optional[float] = None
    user_rating_count: Optional[int] = Field(default=None, alias="userRatingCount")
    primary_type_display_name: Optional[LocalizedText] = Field(default=None, alias="primaryTypeDisplayName")
    price_level: Optional[str] = Field(default=None, alias="priceLevel")
    photos: List[PlacePhoto] = Field(default_factory=list)
    regular_opening_hours: Optional[Dict[str, Any]] = Field(default=None, alias="regularOpeningHours")
    current_opening_hours: Optional[Dict[str, Any]] = Field(default=None, alias="currentOpeningHours")
    website_uri: Optional[str] = Field(default=None, alias="websiteUri")
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")
    location: Optional[LatLng] = None

    model_config = {**_UPSTREAM_CONFIG, "frozen": True}

    @property
    def title(self) -> Optional[str]:
        if self.display_name and self.display_name.text:
            return self.display_name.text
        return None

    def to_upstream(self) -> Dict[str, Any]:
        """Dump the record with the exact keys it was received with"""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)

