import enum
import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Hashable

from sqlalchemy.orm import Session

from app.core.errors import ConcurrencyViolation
from app.crud.crud_alert import alert_crud
from app.models.alert import Alert
from app.models.reading import Reading
from app.models.sensor import Sensor

logger = logging.getLogger(__name__)


class BreachKind(str, enum.Enum):
    MAXIMUM = "maximum"
    MINIMUM = "minimum"
    THRESHOLD = "threshold"


@dataclass(frozen=True)
class Breach:
    kind: BreachKind
    message: str
    bound: float


def first_present(*values: float | None) -> float | None:
    """Return the first value that is not None, in argument order."""
    for value in values:
        if value is not None:
            return value
    return None


def _fmt(value: float) -> str:
    return f"{value:g}"


def detect_breach(value: float, sensor: Any) -> Breach | None:
    """Check ``value`` against the sensor bounds; max wins over min, min over threshold."""
    name, unit = sensor.name, sensor.unit

    if sensor.max_value is not None and value > sensor.max_value:
        return Breach(
            BreachKind.MAXIMUM,
            f"{name} exceeded maximum allowed value: {_fmt(value)} {unit} "
            f"(max: {_fmt(sensor.max_value)} {unit})",
            sensor.max_value,
        )
    if sensor.min_value is not None and value < sensor.min_value:
        return Breach(
            BreachKind.MINIMUM,
            f"{name} is below minimum allowed value: {_fmt(value)} {unit} "
            f"(min: {_fmt(sensor.min_value)} {unit})",
            sensor.min_value,
        )
    if sensor.alert_threshold is not None and value > sensor.alert_threshold:
        return Breach(
            BreachKind.THRESHOLD,
            f"{name} exceeded alert threshold: {_fmt(value)} {unit} "
            f"(threshold: {_fmt(sensor.alert_threshold)} {unit})",
            sensor.alert_threshold,
        )
    return None


class KeyedLock:
    """One lock per key, created on first use."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.Lock] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
        with lock:
            yield


class AlertEvaluator:
    """Turns a persisted reading into at most one ACTIVE alert per sensor.

    The existence check and the insert for one sensor run under a per-sensor
    lock, and the alerts table carries a partial unique index on ACTIVE rows,
    so concurrent breaching readings still yield a single ACTIVE alert.
    """

    def __init__(self) -> None:
        self._locks = KeyedLock()

    def evaluate(self, db: Session, reading: Reading, sensor: Sensor) -> Alert | None:
        if sensor.alert_threshold is None:
            return None

        breach = detect_breach(reading.value, sensor)
        if breach is None:
            return None

        with self._locks.hold(sensor.id):
            existing = alert_crud.get_active_for_sensor(db, sensor.id)
            if existing is not None:
                logger.debug("Sensor %s already has active alert %s", sensor.id, existing.id)
                return None

            try:
                alert = alert_crud.create_active(
                    db,
                    {
                        "sensor_id": sensor.id,
                        "message": breach.message,
                        "value": reading.value,
                        "threshold": first_present(
                            sensor.alert_threshold, sensor.max_value, sensor.min_value
                        ),
                    },
                )
            except ConcurrencyViolation as exc:
                logger.warning("Duplicate active alert rejected: %s", exc.message)
                return None

        logger.info("Alert %s opened for sensor %s (%s)", alert.id, sensor.id, breach.kind.value)
        return alert
