from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session

from app.crud.base import commit
from app.models.reading import Reading


class CRUDReading:
    """Readings are append-only: there is no update or delete here."""

    def create(self, db: Session, obj_in: Dict[str, Any]) -> Reading:
        db_obj = Reading(**obj_in)
        db.add(db_obj)
        commit(db, db_obj)
        return db_obj

    def create_many(self, db: Session, rows: List[Dict[str, Any]]) -> int:
        db.add_all([Reading(**row) for row in rows])
        commit(db)
        return len(rows)

    def get_multi(self, db: Session, limit: int = 1000) -> List[Reading]:
        query = select(Reading).order_by(desc(Reading.timestamp), desc(Reading.id)).limit(limit)
        return list(db.execute(query).scalars().unique().all())

    def get_latest(self, db: Session, limit: int = 50) -> List[Reading]:
        return self.get_multi(db, limit=limit)

    def get_by_station(self, db: Session, station_id: int, limit: int = 100) -> List[Reading]:
        query = (
            select(Reading)
            .where(Reading.station_id == station_id)
            .order_by(desc(Reading.timestamp), desc(Reading.id))
            .limit(limit)
        )
        return list(db.execute(query).scalars().unique().all())

    def get_by_sensor(self, db: Session, sensor_id: int, limit: int = 100) -> List[Reading]:
        query = (
            select(Reading)
            .where(Reading.sensor_id == sensor_id)
            .order_by(desc(Reading.timestamp), desc(Reading.id))
            .limit(limit)
        )
        return list(db.execute(query).scalars().unique().all())

    def get_statistics(
        self,
        db: Session,
        sensor_id: int,
        start_time: datetime,
        end_time: datetime,
    ) -> Dict[str, Any]:
        result = db.execute(
            select(
                func.count(Reading.id).label("count"),
                func.avg(Reading.value).label("average"),
                func.min(Reading.value).label("minimum"),
                func.max(Reading.value).label("maximum"),
            ).where(
                Reading.sensor_id == sensor_id,
                Reading.timestamp >= start_time,
                Reading.timestamp <= end_time,
            )
        )
        stats = result.one()

        return {
            "count": stats.count or 0,
            "average": round(float(stats.average), 4) if stats.average is not None else None,
            "minimum": stats.minimum,
            "maximum": stats.maximum,
        }


reading_crud = CRUDReading()
