import enum


class SensorType(str, enum.Enum):
    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"
    AIR_QUALITY = "air-quality"
    WATER_QUALITY = "water-quality"
    SPECIES_PRESENCE = "species-presence"
    PH = "pH"
    TURBIDITY = "turbidity"
    DISSOLVED_OXYGEN = "dissolved-oxygen"


class AlertStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    RESOLVED = "RESOLVED"
    DISMISSED = "DISMISSED"


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    RESEARCHER = "RESEARCHER"
    TECHNICIAN = "TECHNICIAN"
