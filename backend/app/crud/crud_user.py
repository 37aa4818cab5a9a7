from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.crud.base import commit
from app.models.user import User


class CRUDUser:
    def create(self, db: Session, obj_in: Dict[str, Any]) -> User:
        db_obj = User(**obj_in)
        db.add(db_obj)
        commit(db, db_obj)
        return db_obj

    def get(self, db: Session, id: int) -> Optional[User]:
        return db.get(User, id)

    def get_by_email(self, db: Session, email: str) -> Optional[User]:
        result = db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()


user_crud = CRUDUser()
