from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
from datetime import datetime
from typing import Optional

from src.models.request_models import CitySearchRequest, PlaceSearchRequest, TripRecommendRequest
from src.models.response_models import ErrorEnvelope
from src.services.google_places_service import GooglePlacesService, PlacesServiceError
from src.services.trip_service import TripRecommendationService
from src.services.venue_status_service import VENUE_FIELD_MASK, SimulatedVenueSignals, fetch_venue_status
from src.utils.config import Settings, get_settings, validate_settings

# Configure logging
logging.basicConfig(
    level=get_settings().LOG_LEVEL,
    format=get_settings().LOG_FORMAT
)
logger = logging.getLogger(__name__)


def _error_response(message: str, error: PlacesServiceError) -> JSONResponse:
    details = error.details if error.details is not None else str(error)
    envelope = ErrorEnvelope(error=message, details=details)
    return JSONResponse(status_code=500, content=envelope.model_dump())


def create_app(settings: Optional[Settings] = None,
               places_service: Optional[GooglePlacesService] = None,
               signals: Optional[SimulatedVenueSignals] = None) -> FastAPI:
    """Build the API with its collaborators injected explicitly."""
    settings = settings or get_settings()
    config = settings.to_app_config()

    app = FastAPI(
        title="Trip Planner API",
        description="Search cities and places and assemble two-day trips from the Google Places API",
        version=settings.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.cors_origin],
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "X-Goog-Api-Key", "X-Goog-FieldMask"],
    )

    app.state.settings = settings
    app.state.config = config
    app.state.places_service = places_service or GooglePlacesService(config)
    app.state.trip_service = TripRecommendationService(app.state.places_service)
    app.state.signals = signals or SimulatedVenueSignals()

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"{request.method} {request.url.path}")
        return await call_next(request)

    @app.on_event("startup")
    async def startup_event():
        if not validate_settings(settings):
            logger.warning("GOOGLE_PLACES_API_KEY is not configured; places requests will fail")
        logger.info("Trip Planner API ready")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Clean up resources on shutdown"""
        await app.state.places_service.close()

    @app.post("/api/cities/search")
    async def search_cities(req: CitySearchRequest):
        """Look up candidate cities by name"""
        try:
            places = await app.state.places_service.search_cities(req.city_name)
            return {"places": places}
        except PlacesServiceError as e:
            logger.error(f"[Cities API] Error: {str(e)}")
            return _error_response("Failed to fetch cities", e)

    @app.post("/api/places/search")
    async def search_places(req: PlaceSearchRequest):
        """Search places of a given type in a city; returns the upstream response as-is"""
        try:
            return await app.state.places_service.search_places(req.city_name, req.type)
        except PlacesServiceError as e:
            logger.error(f"[Places API] Error: {str(e)}")
            return _error_response("Failed to fetch places", e)

    @app.post("/api/trips/recommend")
    async def recommend_trip(req: TripRecommendRequest):
        try:
            recommendation = await app.state.trip_service.recommend_trip(
                req.city_name, req.budget, req.trip_type
            )
            return recommendation.to_json_dict()
        except PlacesServiceError as e:
            logger.error(f"[Recommendations] Error: {str(e)}")
            return _error_response("Failed to generate recommendations", e)

    @app.get("/api/places/{place_id}")
    async def get_place_details(place_id: str, fields: str = VENUE_FIELD_MASK):
        try:
            return await app.state.places_service.get_place_details(place_id, fields)
        except PlacesServiceError as e:
            logger.error(f"[Place Details] Error: {str(e)}")
            return _error_response("Failed to fetch place details", e)

    @app.get("/api/venues/{place_id}/status")
    async def get_venue_status(place_id: str):
        """Venue snapshot with simulated crowd level and wait time"""
        try:
            venue = await fetch_venue_status(place_id, app.state.places_service, app.state.signals)
        except PlacesServiceError as e:
            logger.error(f"[Venue Status] Error: {str(e)}")
            return _error_response("Failed to fetch venue data", e)
        return venue.model_dump(mode="json")

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy" if app.state.config.has_places_credential else "degraded",
            "timestamp": datetime.utcnow().isoformat(),
            "services": {
                "google_places": app.state.config.has_places_credential,
            },
            "version": settings.API_VERSION
        }

    @app.get("/")
    async def root():
        """Root endpoint with API information"""
        return {
            "message": "Trip Planner API",
            "version": settings.API_VERSION,
            "docs": "/docs",
            "health": "/health"
        }

    return app


app = create_app()
