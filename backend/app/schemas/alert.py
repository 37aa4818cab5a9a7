from datetime import datetime

from app.models.enums import AlertStatus
from app.schemas.base import CamelModel
from app.schemas.sensor import SensorOut
from app.schemas.user import UserOut


class AlertOut(CamelModel):
    id: int
    sensor_id: int
    message: str
    value: float
    threshold: float
    status: AlertStatus
    user_id: int | None
    created_at: datetime
    resolved_at: datetime | None
    sensor: SensorOut
    user: UserOut | None = None


class AlertCount(CamelModel):
    count: int
