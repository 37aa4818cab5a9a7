from app.models.enums import AlertStatus, SensorType, UserRole
from app.models.station import Station
from app.models.sensor import Sensor
from app.models.reading import Reading
from app.models.alert import Alert
from app.models.user import User

__all__ = ["Alert", "AlertStatus", "Reading", "Sensor", "SensorType", "Station", "User", "UserRole"]
