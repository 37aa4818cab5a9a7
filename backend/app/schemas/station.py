from datetime import datetime

from pydantic import Field, field_validator

from app.schemas.base import CamelModel
from app.schemas.summary import SensorSummary, StationSummary


class StationIn(CamelModel):
    name: str = Field(..., min_length=1)
    description: str | None = None
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    is_active: bool = True


class StationUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)
    longitude: float | None = Field(default=None, ge=-180.0, le=180.0)
    is_active: bool | None = None

    @field_validator("name", "latitude", "longitude", "is_active")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("must not be null")
        return value


class StationOut(StationSummary):
    created_at: datetime
    updated_at: datetime
    sensors: list[SensorSummary] = []
    reading_count: int = 0
