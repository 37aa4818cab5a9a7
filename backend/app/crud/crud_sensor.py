from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.crud.base import commit
from app.models.sensor import Sensor


class CRUDSensor:
    def create(self, db: Session, obj_in: Dict[str, Any]) -> Sensor:
        db_obj = Sensor(**obj_in)
        db.add(db_obj)
        commit(db, db_obj)
        return db_obj

    def get(self, db: Session, id: int) -> Optional[Sensor]:
        return db.get(Sensor, id)

    def get_multi(self, db: Session, station_id: Optional[int] = None) -> List[Sensor]:
        query = select(Sensor).order_by(Sensor.id)
        if station_id is not None:
            query = query.where(Sensor.station_id == station_id, Sensor.is_active.is_(True))
        return list(db.execute(query).scalars().unique().all())

    def update(self, db: Session, sensor: Sensor, changes: Dict[str, Any]) -> Sensor:
        for key, value in changes.items():
            setattr(sensor, key, value)
        commit(db, sensor)
        return sensor

    def remove(self, db: Session, sensor: Sensor) -> None:
        db.delete(sensor)
        commit(db)


sensor_crud = CRUDSensor()
