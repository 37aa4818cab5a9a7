from app.models.enums import SensorType
from app.schemas.base import CamelModel


class StationSummary(CamelModel):
    id: int
    name: str
    description: str | None
    latitude: float
    longitude: float
    is_active: bool


class SensorSummary(CamelModel):
    id: int
    station_id: int
    name: str
    type: SensorType
    unit: str
    min_value: float | None
    max_value: float | None
    alert_threshold: float | None
    is_active: bool
