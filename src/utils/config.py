from pydantic import BaseModel
from pydantic_settings import BaseSettings
from typing import Optional

PLACEHOLDER_API_KEY = "your-google-places-key"


class AppConfig(BaseModel):
    """Configuration handed explicitly to every service and widget."""
    places_api_key: str = ""
    cors_origin: str = "http://localhost:3000"
    poll_interval_ms: int = 5 * 60 * 1000

    places_base_url: str = "https://places.googleapis.com/v1"
    city_search_region: str = "France"
    language_code: str = "en"
    request_timeout_seconds: Optional[float] = None

    @property
    def has_places_credential(self) -> bool:
        return bool(self.places_api_key) and self.places_api_key != PLACEHOLDER_API_KEY


class Settings(BaseSettings):
    # Google Places Configuration
    GOOGLE_PLACES_API_KEY: str = PLACEHOLDER_API_KEY
    PLACES_API_BASE_URL: str = "https://places.googleapis.com/v1"
    CITY_SEARCH_REGION: str = "France"
    PLACES_LANGUAGE_CODE: str = "en"
    PLACES_REQUEST_TIMEOUT_SECONDS: Optional[float] = None  # None waits on upstream indefinitely

    # API Configuration
    API_VERSION: str = "1.0.0"
    DEBUG_MODE: bool = False
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 4000
    CORS_ORIGIN: str = "http://localhost:3000"

    # Venue status polling
    VENUE_POLL_INTERVAL_MS: int = 300000

    # Client tier
    BACKEND_URL: str = "http://localhost:4000"
    RECOMMENDATION_STORE_PATH: str = ".tripplanner/storage.json"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    model_config = {"env_file": ".env", "case_sensitive": True}

    def to_app_config(self) -> AppConfig:
        """Collapse the environment-facing settings into the injected config object"""
        return AppConfig(
            places_api_key=self.GOOGLE_PLACES_API_KEY,
            cors_origin=self.CORS_ORIGIN,
            poll_interval_ms=self.VENUE_POLL_INTERVAL_MS,
            places_base_url=self.PLACES_API_BASE_URL,
            city_search_region=self.CITY_SEARCH_REGION,
            language_code=self.PLACES_LANGUAGE_CODE,
            request_timeout_seconds=self.PLACES_REQUEST_TIMEOUT_SECONDS,
        )


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance"""
    return settings


def validate_settings(current: Optional[Settings] = None) -> bool:
    """Validate that all required settings are configured"""
    current = current or settings
    required_settings = ["GOOGLE_PLACES_API_KEY"]

    missing_settings = []
    for setting in required_settings:
        value = getattr(current, setting)
        if not value or value == PLACEHOLDER_API_KEY:
            missing_settings.append(setting)

    if missing_settings:
        print(f"Missing or invalid settings: {', '.join(missing_settings)}")
        print("Please configure these settings in your .env file or environment variables")
        return False

    return True
