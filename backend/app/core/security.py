"""Bearer-token authentication and the role capability table.

Token issuance belongs to the identity provider; this module only needs to
turn a token into a ``User`` and answer "may this actor do that".
"""

import enum
import logging
from datetime import timedelta

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.errors import AuthenticationError, PermissionDeniedError
from app.crud.crud_user import user_crud
from app.models.enums import UserRole
from app.models.user import User
from app.utils.clock import utcnow

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class Action(str, enum.Enum):
    RESOLVE_ALERT = "resolve_alert"
    DISMISS_ALERT = "dismiss_alert"
    MANAGE_CATALOG = "manage_catalog"


CAPABILITIES: dict[Action, frozenset[UserRole]] = {
    Action.RESOLVE_ALERT: frozenset({UserRole.ADMIN, UserRole.MANAGER, UserRole.TECHNICIAN}),
    Action.DISMISS_ALERT: frozenset({UserRole.ADMIN, UserRole.MANAGER, UserRole.TECHNICIAN}),
    Action.MANAGE_CATALOG: frozenset({UserRole.ADMIN, UserRole.MANAGER}),
}


def can(actor: User | None, action: Action) -> bool:
    if actor is None or not actor.is_active:
        return False
    try:
        role = UserRole(actor.role)
    except ValueError:
        return False
    return role in CAPABILITIES.get(action, frozenset())


def ensure_allowed(actor: User | None, action: Action) -> None:
    if not can(actor, action):
        logger.info("Denied %s for user %s", action.value, getattr(actor, "id", None))
        raise PermissionDeniedError(f"Not allowed to {action.value.replace('_', ' ')}")


def create_access_token(user: User, expires_minutes: int | None = None) -> str:
    minutes = expires_minutes if expires_minutes is not None else settings.access_token_expire_minutes
    payload = {
        "sub": str(user.id),
        "role": user.role,
        "exp": utcnow() + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.token_algorithm)


def decode_access_token(token: str) -> int:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.token_algorithm])
        return int(payload["sub"])
    except (jwt.PyJWTError, KeyError, ValueError) as exc:
        raise AuthenticationError("Invalid or expired token") from exc


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    user = user_crud.get(db, decode_access_token(credentials.credentials))
    if user is None or not user.is_active:
        raise AuthenticationError("Unknown or inactive user")
    return user
