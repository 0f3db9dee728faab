from dataclasses import dataclass
from html import escape
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple
from urllib.parse import urlencode
import logging

from src.models.response_models import TripRecommendation
from src.models.view_models import MapPoint
from src.services.google_places_service import GooglePlacesService
from src.services.places_cache import PlaceDetailsCache
from src.utils.config import AppConfig

DEFAULT_CENTER = (48.8566, 2.3522)  # Paris
DEFAULT_ZOOM = 13
MAX_FIT_ZOOM = 16
MAX_ZOOM = 21

POPUP_FIELD_MASK = "name,formattedAddress,rating,userRatingCount,photos"
POPUP_PHOTO_HEIGHT_PX = 200


@dataclass
class MapMarker:
    point_id: str
    title: str
    lat: float
    lng: float
    animation: str = "DROP"
    attached: bool = True

    @property
    def position(self) -> Tuple[float, float]:
        return (self.lat, self.lng)


@dataclass
class LatLngBounds:
    south: Optional[float] = None
    west: Optional[float] = None
    north: Optional[float] = None
    east: Optional[float] = None

    def extend(self, lat: float, lng: float):
        self.south = lat if self.south is None else min(self.south, lat)
        self.north = lat if self.north is None else max(self.north, lat)
        self.west = lng if self.west is None else min(self.west, lng)
        self.east = lng if self.east is None else max(self.east, lng)

    @property
    def is_empty(self) -> bool:
        return self.south is None

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.south + self.north) / 2, (self.west + self.east) / 2)

    @property
    def span(self) -> float:
        return max(self.north - self.south, self.east - self.west)


@dataclass
class InfoWindow:
    content: str = ""
    anchor: Optional[str] = None
    is_open: bool = False


def zoom_for_span(span: float) -> int:
    """Calculate a zoom level that shows a region of the given degree span"""
    if span <= 0:
        return MAX_ZOOM
    if span > 10:
        return 5
    elif span > 5:
        return 6
    elif span > 2:
        return 7
    elif span > 1:
        return 8
    elif span > 0.5:
        return 9
    elif span > 0.2:
        return 10
    elif span > 0.1:
        return 11
    elif span > 0.05:
        return 12
    elif span > 0.02:
        return 13
    elif span > 0.01:
        return 14
    elif span > 0.005:
        return 15
    elif span > 0.0025:
        return 16
    elif span > 0.001:
        return 17
    else:
        return 18


class MapCanvas:
    """In-memory map instance: viewport, markers and a single info window."""

    def __init__(self, center: Tuple[float, float] = DEFAULT_CENTER, zoom: int = DEFAULT_ZOOM,
                 styles: Optional[List[Dict[str, Any]]] = None):
        self.center = center
        self.zoom = zoom
        self.styles = styles or []
        self.markers: List[MapMarker] = []
        self.info_window = InfoWindow()

    def add_marker(self, point: MapPoint) -> MapMarker:
        marker = MapMarker(point_id=point.id, title=point.title, lat=point.lat, lng=point.lng)
        self.markers.append(marker)
        return marker

    def remove_marker(self, marker: MapMarker):
        marker.attached = False
        if marker in self.markers:
            self.markers.remove(marker)

    def fit_bounds(self, bounds: LatLngBounds):
        self.center = bounds.center
        self.zoom = zoom_for_span(bounds.span)

    def set_zoom(self, zoom: int):
        self.zoom = zoom

    def open_info_window(self, content: str, marker: MapMarker):
        self.info_window = InfoWindow(content=content, anchor=marker.point_id, is_open=True)


class MapHandle:
    """Out-parameter through which a mounted widget publishes its canvas."""

    def __init__(self):
        self.current: Optional[MapCanvas] = None


MapLoader = Callable[[Tuple[float, float], int], Awaitable[MapCanvas]]


async def load_map_canvas(center: Tuple[float, float], zoom: int) -> MapCanvas:
    # Points of interest labels hidden so only trip markers show
    return MapCanvas(center=center, zoom=zoom, styles=[{
        "featureType": "poi",
        "elementType": "labels",
        "stylers": [{"visibility": "off"}],
    }])


def points_from_recommendation(recommendation: TripRecommendation) -> List[MapPoint]:
    """Map points for every stored place that carries a location"""
    points = []
    for day_number, day in recommendation.days():
        for slot_name, slot in day.slots():
            for index, place in enumerate(slot.places):
                if place.location is None:
                    continue
                points.append(MapPoint(
                    id=place.id or f"day{day_number}-{slot_name}-{index}",
                    title=place.title or "Unnamed Place",
                    lat=place.location.latitude,
                    lng=place.location.longitude,
                    place_id=place.id,
                ))
    return points


class MapWidget:
    def __init__(self, places_service: GooglePlacesService, config: AppConfig,
                 loader: MapLoader = load_map_canvas,
                 on_point_select: Optional[Callable[[str], None]] = None):
        self.places_service = places_service
        self.config = config
        self.loader = loader
        self.on_point_select = on_point_select
        self.logger = logging.getLogger(__name__)

        self.canvas: Optional[MapCanvas] = None
        self.markers: List[MapMarker] = []
        self.points: Dict[str, MapPoint] = {}
        self.details = PlaceDetailsCache(self._fetch_details)

    async def _fetch_details(self, place_id: str) -> Dict[str, Any]:
        return await self.places_service.get_place_details(place_id, POPUP_FIELD_MASK)

    async def mount(self, initial_center: Optional[Tuple[float, float]] = None,
                    handle: Optional[MapHandle] = None) -> Optional[MapCanvas]:
        try:
            self.canvas = await self.loader(initial_center or DEFAULT_CENTER, DEFAULT_ZOOM)
        except Exception as e:
            self.logger.error(f"Error loading map: {str(e)}")
            return None

        if handle is not None:
            handle.current = self.canvas
        return self.canvas

    def set_points(self, points: List[MapPoint]) -> List[MapMarker]:
        """Replace all markers and fit the viewport around the new ones."""
        if self.canvas is None:
            return []

        for marker in self.markers:
            self.canvas.remove_marker(marker)

        self.points = {point.id: point for point in points}
        self.markers = [self.canvas.add_marker(point) for point in points]

        if self.markers:
            bounds = LatLngBounds()
            for marker in self.markers:
                bounds.extend(marker.lat, marker.lng)
            self.canvas.fit_bounds(bounds)

            # Don't zoom in too far on single points
            if self.canvas.zoom > MAX_FIT_ZOOM:
                self.canvas.set_zoom(MAX_FIT_ZOOM)

        return self.markers

    def photo_url(self, photo_name: str) -> str:
        params = urlencode({"key": self.config.places_api_key, "maxHeightPx": POPUP_PHOTO_HEIGHT_PX})
        return f"{self.config.places_base_url}/{photo_name}/media?{params}"

    def build_popup_content(self, point: MapPoint, place: Optional[Dict[str, Any]]) -> str:
        title = escape(point.title)
        content = f'<div class="p-4 max-w-sm"><h3 class="text-lg font-semibold mb-2">{title}</h3>'

        if place:
            photos = place.get("photos") or []
            if photos and photos[0].get("name"):
                src = escape(self.photo_url(photos[0]["name"]))
                content += f'<img src="{src}" class="w-full h-32 object-cover rounded mb-2" alt="{title}">'

            content += f'<p class="text-gray-600 mb-2">{escape(place.get("formattedAddress") or "")}</p>'
            if place.get("rating"):
                reviews = place.get("userRatingCount")
                content += (
                    '<div class="flex items-center mb-2">'
                    '<span class="text-yellow-500">★</span>'
                    f'<span class="ml-1">{place["rating"]}</span>'
                    f'<span class="text-gray-500 text-sm ml-2">({reviews if reviews is not None else 0} reviews)</span>'
                    '</div>'
                )

        content += "</div>"
        return content

    async def select_point(self, point_id: str) -> Optional[str]:
        """Open the info popup for a marker, fetching place details on first use."""
        if self.canvas is None:
            return None
        point = self.points.get(point_id)
        marker = next((m for m in self.markers if m.point_id == point_id), None)
        if point is None or marker is None:
            self.logger.warning(f"Unknown map point: {point_id}")
            return None

        place = await self.details.get(point.place_id) if point.place_id else None
        content = self.build_popup_content(point, place)
        self.canvas.open_info_window(content, marker)

        if self.on_point_select:
            self.on_point_select(point.id)
        return content
