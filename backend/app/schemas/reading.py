from datetime import datetime

from pydantic import Field

from app.schemas.base import CamelModel
from app.schemas.sensor import SensorOut
from app.schemas.summary import StationSummary


class ReadingIn(CamelModel):
    station_id: int
    sensor_id: int
    value: float = Field(..., allow_inf_nan=False)
    timestamp: datetime | None = None


class ReadingOut(CamelModel):
    id: int
    station_id: int
    sensor_id: int
    value: float
    timestamp: datetime
    sensor: SensorOut
    station: StationSummary


class ReadingStatistics(CamelModel):
    sensor_id: int
    start: datetime
    end: datetime
    count: int
    average: float | None
    minimum: float | None
    maximum: float | None
