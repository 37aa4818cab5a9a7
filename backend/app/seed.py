"""Populate an empty database with demo users, stations, sensors and readings.

    python -m app.seed
"""

import logging
import random
from datetime import timedelta
from typing import Any

import bcrypt
from sqlalchemy.orm import Session

from app.core import Base, SessionLocal, engine
from app.core.security import create_access_token
from app.crud import reading_crud, sensor_crud, station_crud, user_crud
from app.models.enums import SensorType, UserRole
from app.models.sensor import Sensor
from app.utils.clock import utcnow
from app.utils.logger import setup_logging

logger = logging.getLogger(__name__)

DEFAULT_PASSWORD = "admin123"

USERS = [
    {"email": "admin@monitoring.local", "name": "Administrator", "role": UserRole.ADMIN},
    {"email": "manager@monitoring.local", "name": "Environmental Manager", "role": UserRole.MANAGER},
    {"email": "researcher@monitoring.local", "name": "Researcher", "role": UserRole.RESEARCHER},
    {"email": "technician@monitoring.local", "name": "Technician", "role": UserRole.TECHNICIAN},
]

STATIONS = [
    {
        "name": "Turtle Beach Station",
        "description": "Sea turtle monitoring and water quality",
        "latitude": -23.5505,
        "longitude": -46.6333,
        "sensors": [
            ("Water Temperature", SensorType.TEMPERATURE, "°C", 20, 30, 28),
            ("Turtle Presence", SensorType.SPECIES_PRESENCE, "units", 0, 100, 0),
            ("Water Quality", SensorType.WATER_QUALITY, "index", 0, 100, 50),
            ("Water pH", SensorType.PH, "pH", 6.5, 8.5, 7.0),
        ],
    },
    {
        "name": "Atlantic Forest Reserve Station",
        "description": "Biodiversity and air quality monitoring",
        "latitude": -23.5489,
        "longitude": -46.6388,
        "sensors": [
            ("Air Temperature", SensorType.TEMPERATURE, "°C", 15, 35, 32),
            ("Humidity", SensorType.HUMIDITY, "%", 40, 90, 30),
            ("Air Quality", SensorType.AIR_QUALITY, "AQI", 0, 500, 100),
        ],
    },
    {
        "name": "Clean River Station",
        "description": "River water quality monitoring",
        "latitude": -23.5521,
        "longitude": -46.6312,
        "sensors": [
            ("Dissolved Oxygen", SensorType.DISSOLVED_OXYGEN, "mg/L", 5, 12, 6),
            ("Turbidity", SensorType.TURBIDITY, "NTU", 0, 50, 25),
            ("pH", SensorType.PH, "pH", 6.5, 8.5, 7.0),
        ],
    },
]

HISTORY_HOURS = 24
HISTORY_STEP = timedelta(minutes=30)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _simulated_series(sensor: Sensor, points: int) -> list[float]:
    low = sensor.min_value if sensor.min_value is not None else 0.0
    high = sensor.max_value if sensor.max_value is not None else 100.0
    spread = (high - low) * 0.05

    if sensor.type == SensorType.SPECIES_PRESENCE.value:
        return [float(random.randint(1, 10)) if random.random() > 0.7 else 0.0 for _ in range(points)]

    value = (low + high) / 2
    series = []
    for _ in range(points):
        value = _clamp(value + random.uniform(-spread, spread), low, high)
        series.append(round(value, 2))
    return series


def _hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def seed(db: Session) -> dict[str, Any]:
    """Create the demo catalog. Returns the created users keyed by email."""
    if user_crud.get_by_email(db, USERS[0]["email"]) is not None:
        logger.info("Database already seeded, skipping")
        return {}

    password_hash = _hash_password(DEFAULT_PASSWORD)
    users = {
        item["email"]: user_crud.create(
            db,
            {"email": item["email"], "name": item["name"], "role": item["role"].value, "password_hash": password_hash},
        )
        for item in USERS
    }

    points = int(timedelta(hours=HISTORY_HOURS) / HISTORY_STEP) + 1
    now = utcnow()

    for station_def in STATIONS:
        station = station_crud.create(
            db,
            {key: station_def[key] for key in ("name", "description", "latitude", "longitude")},
        )
        for name, sensor_type, unit, min_value, max_value, threshold in station_def["sensors"]:
            sensor = sensor_crud.create(
                db,
                {
                    "station_id": station.id,
                    "name": name,
                    "type": sensor_type.value,
                    "unit": unit,
                    "min_value": min_value,
                    "max_value": max_value,
                    "alert_threshold": threshold,
                },
            )
            reading_crud.create_many(
                db,
                [
                    {
                        "sensor_id": sensor.id,
                        "station_id": station.id,
                        "value": value,
                        "timestamp": now - HISTORY_STEP * (points - 1 - index),
                    }
                    for index, value in enumerate(_simulated_series(sensor, points))
                ],
            )

    logger.info("Seeded %d users and %d stations", len(users), len(STATIONS))
    return users


def main() -> None:
    setup_logging()
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        users = seed(db)
        for email, user in users.items():
            print(f"{email} ({user.role}) password={DEFAULT_PASSWORD}")
            print(f"  token: {create_access_token(user)}")


if __name__ == "__main__":
    main()
