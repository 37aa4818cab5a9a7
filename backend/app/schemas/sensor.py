from datetime import datetime

from pydantic import Field, field_validator, model_validator

from app.models.enums import SensorType
from app.schemas.base import CamelModel
from app.schemas.summary import SensorSummary, StationSummary


class SensorIn(CamelModel):
    station_id: int
    name: str = Field(..., min_length=1)
    type: SensorType
    unit: str = Field(..., min_length=1)
    min_value: float | None = None
    max_value: float | None = None
    alert_threshold: float | None = None
    is_active: bool = True

    @model_validator(mode="after")
    def check_bounds(self) -> "SensorIn":
        if self.min_value is not None and self.max_value is not None and self.min_value >= self.max_value:
            raise ValueError("minValue must be lower than maxValue")
        return self


class SensorUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    type: SensorType | None = None
    unit: str | None = Field(default=None, min_length=1)
    min_value: float | None = None
    max_value: float | None = None
    alert_threshold: float | None = None
    is_active: bool | None = None

    @field_validator("name", "type", "unit", "is_active")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("must not be null")
        return value


class SensorOut(SensorSummary):
    created_at: datetime
    station: StationSummary
