from typing import Any, Dict, List, Optional

from sqlalchemy import desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConcurrencyViolation
from app.crud.base import commit
from app.models.alert import Alert
from app.models.enums import AlertStatus


class CRUDAlert:
    def create_active(self, db: Session, obj_in: Dict[str, Any]) -> Alert:
        """Insert an ACTIVE alert.

        Raises ``ConcurrencyViolation`` when the store already holds an ACTIVE
        alert for the same sensor (partial unique index).
        """
        db_obj = Alert(**obj_in, status=AlertStatus.ACTIVE.value)
        db.add(db_obj)
        try:
            db.flush()
        except IntegrityError as exc:
            db.rollback()
            raise ConcurrencyViolation(
                f"Sensor {obj_in.get('sensor_id')} already has an active alert"
            ) from exc
        commit(db, db_obj)
        return db_obj

    def get(self, db: Session, id: int) -> Optional[Alert]:
        return db.get(Alert, id)

    def get_active_for_sensor(self, db: Session, sensor_id: int) -> Optional[Alert]:
        result = db.execute(
            select(Alert).where(
                Alert.sensor_id == sensor_id,
                Alert.status == AlertStatus.ACTIVE.value,
            )
        )
        return result.scalars().first()

    def get_multi(self, db: Session, status: Optional[AlertStatus] = None) -> List[Alert]:
        query = select(Alert)

        if status is not None:
            query = query.where(Alert.status == status.value)

        query = query.order_by(desc(Alert.created_at), desc(Alert.id))
        return list(db.execute(query).scalars().unique().all())

    def count_active(self, db: Session) -> int:
        result = db.execute(
            select(func.count(Alert.id)).where(Alert.status == AlertStatus.ACTIVE.value)
        )
        return result.scalar_one()

    def set_status(self, db: Session, alert: Alert, changes: Dict[str, Any]) -> Alert:
        for key, value in changes.items():
            setattr(alert, key, value)
        commit(db, alert)
        return alert


alert_crud = CRUDAlert()
