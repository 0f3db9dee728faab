#!/usr/bin/env python3
"""
Command line front end for the trip planner.

Talks to the backend for searches and recommendations, keeps the current
recommendation in local storage and renders it, and polls venue status
straight from the places directory.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

import httpx

from src.client.api_client import BackendError, TripPlannerClient
from src.services.google_places_service import GooglePlacesService
from src.services.maps_service import MapHandle, MapWidget, points_from_recommendation
from src.services.photo_service import PHOTO_URL_STRATEGIES, get_photo_url_strategy
from src.services.recommendation_store import (
    JsonFileStorage, RecommendationNotFoundError, RecommendationParseError, RecommendationStore,
)
from src.services.results_renderer import ResultsRenderer
from src.services.venue_status_service import VenueStatusMonitor, VenueStatusState
from src.utils.config import Settings, get_settings
from src.utils.formatters import ResponseFormatter

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tripplanner", description="Plan a two-day city trip")
    parser.add_argument("--backend-url", help="Trip planner backend URL (default: BACKEND_URL)")
    parser.add_argument("--store", help="Local storage file (default: RECOMMENDATION_STORE_PATH)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    cities = sub.add_parser("cities", help="Search for a city")
    cities.add_argument("city_name")

    places = sub.add_parser("places", help="Search places of a type in a city")
    places.add_argument("city_name")
    places.add_argument("type", help='e.g. "museums" or "restaurants"')

    plan = sub.add_parser("plan", help="Generate and store a two-day trip")
    plan.add_argument("city_name")
    plan.add_argument("--budget", default="medium")
    plan.add_argument("--trip-type", default="culture")

    results = sub.add_parser("results", help="Show the stored trip")
    results.add_argument("--photo-strategy", choices=sorted(PHOTO_URL_STRATEGIES), default="resource")
    results.add_argument("--itinerary", action="store_true", help="Show the flattened timed itinerary")

    status = sub.add_parser("status", help="Show venue status (simulated crowd and wait)")
    status.add_argument("place_id")
    status.add_argument("--watch", action="store_true", help="Keep polling until interrupted")

    map_cmd = sub.add_parser("map", help="Summarise map markers for the stored trip")
    map_cmd.add_argument("--select", metavar="POINT_ID", help="Open the info popup for a point")

    return parser


def _store(args, settings: Settings) -> RecommendationStore:
    return RecommendationStore(JsonFileStorage(args.store or settings.RECOMMENDATION_STORE_PATH))


async def _cmd_cities(args, settings: Settings) -> int:
    client = TripPlannerClient(args.backend_url or settings.BACKEND_URL)
    try:
        for place in await client.search_cities(args.city_name):
            name = (place.get("displayName") or {}).get("text", "")
            print(f"{name} - {place.get('formattedAddress', '')}")
    finally:
        await client.close()
    return 0


async def _cmd_places(args, settings: Settings) -> int:
    client = TripPlannerClient(args.backend_url or settings.BACKEND_URL)
    try:
        data = await client.search_places(args.city_name, args.type)
    finally:
        await client.close()
    print(json.dumps(data, indent=2, ensure_ascii=False))
    return 0


async def _cmd_plan(args, settings: Settings) -> int:
    client = TripPlannerClient(args.backend_url or settings.BACKEND_URL)
    try:
        recommendation = await client.recommend_trip(args.city_name, args.budget, args.trip_type)
    finally:
        await client.close()
    _store(args, settings).save(recommendation)
    renderer = ResultsRenderer(_store(args, settings), get_photo_url_strategy("resource", settings.to_app_config()))
    print(ResponseFormatter.format_results(renderer.render()))
    return 0


def _cmd_results(args, settings: Settings) -> int:
    strategy = get_photo_url_strategy(args.photo_strategy, settings.to_app_config())
    view = ResultsRenderer(_store(args, settings), strategy).render()
    print(ResponseFormatter.format_results(view))
    if args.itinerary:
        for item in view.itinerary:
            print(ResponseFormatter.format_itinerary_item(item))
    return 0 if view.error is None else 1


async def _cmd_status(args, settings: Settings) -> int:
    config = settings.to_app_config()
    places_service = GooglePlacesService(config)

    def _print(monitor: VenueStatusMonitor):
        if monitor.state == VenueStatusState.READY and monitor.data:
            print(ResponseFormatter.format_venue_status(monitor.data))
            print()
        elif monitor.state == VenueStatusState.ERROR:
            print("Failed to load venue status (run again to retry)")

    monitor = VenueStatusMonitor(args.place_id, places_service, config, on_change=_print)
    try:
        if not args.watch:
            state = await monitor.refresh()
            return 0 if state == VenueStatusState.READY else 1
        await monitor.start()
        while True:
            await asyncio.sleep(3600)
    finally:
        await monitor.stop()
        await places_service.close()


async def _cmd_map(args, settings: Settings) -> int:
    try:
        recommendation = _store(args, settings).load()
    except (RecommendationNotFoundError, RecommendationParseError) as e:
        print(str(e))
        return 1

    config = settings.to_app_config()
    places_service = GooglePlacesService(config)
    widget = MapWidget(places_service, config)
    handle = MapHandle()
    try:
        if await widget.mount(handle=handle) is None:
            print("Map failed to load")
            return 1
        markers = widget.set_points(points_from_recommendation(recommendation))
        canvas = handle.current
        print(f"Center: {canvas.center[0]:.5f}, {canvas.center[1]:.5f}  Zoom: {canvas.zoom}")
        for marker in markers:
            print(f"[{marker.point_id}] {marker.title} @ {marker.lat:.5f}, {marker.lng:.5f}")
        if args.select:
            content = await widget.select_point(args.select)
            print(content if content is not None else f"No such point: {args.select}")
    finally:
        await places_service.close()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.LOG_LEVEL,
        format=settings.LOG_FORMAT
    )

    try:
        if args.command == "results":
            return _cmd_results(args, settings)
        handlers = {
            "cities": _cmd_cities,
            "places": _cmd_places,
            "plan": _cmd_plan,
            "status": _cmd_status,
            "map": _cmd_map,
        }
        return asyncio.run(handlers[args.command](args, settings))
    except BackendError as e:
        print(f"{e} ({e.status_code})")
        if e.details:
            print(json.dumps(e.details, indent=2, ensure_ascii=False, default=str))
        return 1
    except httpx.HTTPError as e:
        logger.error(f"Backend unreachable: {str(e)}")
        return 1
    except RecommendationParseError as e:
        print(f"{e}: {args.store or settings.RECOMMENDATION_STORE_PATH}")
        return 1
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())
