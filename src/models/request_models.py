from pydantic import BaseModel, Field


class CitySearchRequest(BaseModel):
    city_name: str = Field(..., alias="cityName")

    model_config = {"populate_by_name": True}


class PlaceSearchRequest(BaseModel):
    city_name: str = Field(..., alias="cityName")
    type: str

    model_config = {"populate_by_name": True}


class TripRecommendRequest(BaseModel):
    city_name: str = Field(..., alias="cityName")
    # Accepted for the client contract; assembly ignores both
    budget: str = ""
    trip_type: str = Field("", alias="tripType")

    model_config = {"populate_by_name": True}
