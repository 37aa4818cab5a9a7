import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import PersistenceError

logger = logging.getLogger(__name__)


def commit(db: Session, *instances) -> None:
    """Commit the session and refresh ``instances``, rolling back on failure."""
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Database commit failed: %s", exc)
        raise PersistenceError("Database write failed") from exc
    for instance in instances:
        db.refresh(instance)
