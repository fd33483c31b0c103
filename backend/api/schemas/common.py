"""
Shared schema base classes and the response envelope.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class GeoPoint(CamelModel):
    """GeoJSON point. Coordinates are ``[longitude, latitude]``."""

    type: str = "Point"
    coordinates: list[float] = Field(..., min_length=2, max_length=2)
    address: str | None = Field(default=None, max_length=500)

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        if v != "Point":
            raise ValueError("Location type must be Point")
        return v

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, v: list[float]) -> list[float]:
        lng, lat = v
        if not -180 <= lng <= 180:
            raise ValueError("Longitude must be between -180 and 180")
        if not -90 <= lat <= 90:
            raise ValueError("Latitude must be between -90 and 90")
        return v

    @property
    def longitude(self) -> float:
        return self.coordinates[0]

    @property
    def latitude(self) -> float:
        return self.coordinates[1]

    def to_columns(self) -> dict[str, Any]:
        return {"latitude": self.latitude, "longitude": self.longitude, "address": self.address}


def point_or_none(latitude: float | None, longitude: float | None, address: str | None = None):
    if latitude is None or longitude is None:
        return None
    return {"type": "Point", "coordinates": [longitude, latitude], "address": address}


def success(results: int | None = None, **data: Any) -> dict[str, Any]:
    """Build the ``{status, [results], data}`` success envelope."""
    body: dict[str, Any] = {"status": "success"}
    if results is not None:
        body["results"] = results
    body["data"] = data
    return body
