from app.schemas.alert import AlertCount, AlertOut
from app.schemas.reading import ReadingIn, ReadingOut, ReadingStatistics
from app.schemas.sensor import SensorIn, SensorOut, SensorUpdate
from app.schemas.station import StationIn, StationOut, StationUpdate
from app.schemas.summary import SensorSummary, StationSummary
from app.schemas.user import UserOut

__all__ = [
    "AlertCount",
    "AlertOut",
    "ReadingIn",
    "ReadingOut",
    "ReadingStatistics",
    "SensorIn",
    "SensorOut",
    "SensorSummary",
    "SensorUpdate",
    "StationIn",
    "StationOut",
    "StationSummary",
    "StationUpdate",
    "UserOut",
]
