import logging

from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationError
from app.crud.crud_reading import reading_crud
from app.crud.crud_sensor import sensor_crud
from app.models.reading import Reading
from app.schemas.alert import AlertOut
from app.schemas.reading import ReadingIn, ReadingOut
from app.services.alert_engine import AlertEvaluator
from app.services.broadcast import BroadcastChannel
from app.utils.clock import as_utc, utcnow

logger = logging.getLogger(__name__)


class ReadingIngest:
    """Persist a reading, evaluate it, then broadcast the outcome.

    The three steps are not one transaction: if evaluation fails the reading
    stays stored but is never broadcast, and broadcast failures never undo
    the stored reading.
    """

    def __init__(self, evaluator: AlertEvaluator, channel: BroadcastChannel) -> None:
        self.evaluator = evaluator
        self.channel = channel

    def ingest(self, db: Session, reading_in: ReadingIn) -> Reading:
        sensor = sensor_crud.get(db, reading_in.sensor_id)
        if sensor is None:
            raise NotFoundError(f"Sensor {reading_in.sensor_id} not found")
        if sensor.station_id != reading_in.station_id:
            raise ValidationError(
                f"Sensor {sensor.id} belongs to station {sensor.station_id}, not {reading_in.station_id}"
            )

        timestamp = as_utc(reading_in.timestamp) if reading_in.timestamp else utcnow()

        reading = reading_crud.create(
            db,
            {
                "sensor_id": sensor.id,
                "station_id": sensor.station_id,
                "value": reading_in.value,
                "timestamp": timestamp,
            },
        )

        alert = self.evaluator.evaluate(db, reading, sensor)

        self._broadcast(self.channel.publish_reading, ReadingOut.model_validate(reading))
        if alert is not None:
            self._broadcast(self.channel.publish_alert, AlertOut.model_validate(alert))

        return reading

    @staticmethod
    def _broadcast(publish, payload) -> None:
        try:
            publish(payload)
        except Exception:
            logger.exception("Broadcast failed; continuing without it")
