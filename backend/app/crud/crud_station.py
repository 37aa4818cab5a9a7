from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.crud.base import commit
from app.models.station import Station


class CRUDStation:
    def create(self, db: Session, obj_in: Dict[str, Any]) -> Station:
        db_obj = Station(**obj_in)
        db.add(db_obj)
        commit(db, db_obj)
        return db_obj

    def get(self, db: Session, id: int) -> Optional[Station]:
        return db.get(Station, id)

    def get_multi(self, db: Session) -> List[Station]:
        query = select(Station).order_by(Station.id)
        return list(db.execute(query).scalars().unique().all())

    def update(self, db: Session, station: Station, changes: Dict[str, Any]) -> Station:
        for key, value in changes.items():
            setattr(station, key, value)
        commit(db, station)
        return station

    def remove(self, db: Session, station: Station) -> None:
        db.delete(station)
        commit(db)


station_crud = CRUDStation()
