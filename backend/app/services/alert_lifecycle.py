import logging

from sqlalchemy.orm import Session

from app.core.errors import InvalidTransitionError, NotFoundError
from app.core.security import Action, ensure_allowed
from app.crud.crud_alert import alert_crud
from app.models.alert import Alert
from app.models.enums import AlertStatus
from app.models.user import User
from app.utils.clock import utcnow

logger = logging.getLogger(__name__)


def _transition(db: Session, alert_id: int, target: AlertStatus, actor: User) -> Alert:
    alert = alert_crud.get(db, alert_id)
    if alert is None:
        raise NotFoundError("Alert not found")

    if alert.status == target.value:
        return alert
    if alert.status != AlertStatus.ACTIVE.value:
        raise InvalidTransitionError(f"Alert {alert_id} is already {alert.status}")

    changes = {"status": target.value, "user_id": actor.id}
    if target is AlertStatus.RESOLVED:
        changes["resolved_at"] = utcnow()

    alert = alert_crud.set_status(db, alert, changes)
    logger.info("Alert %s %s by user %s", alert.id, target.value.lower(), actor.id)
    return alert


def resolve_alert(db: Session, alert_id: int, actor: User) -> Alert:
    ensure_allowed(actor, Action.RESOLVE_ALERT)
    return _transition(db, alert_id, AlertStatus.RESOLVED, actor)


def dismiss_alert(db: Session, alert_id: int, actor: User) -> Alert:
    ensure_allowed(actor, Action.DISMISS_ALERT)
    return _transition(db, alert_id, AlertStatus.DISMISSED, actor)
