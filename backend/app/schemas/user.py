from app.models.enums import UserRole
from app.schemas.base import CamelModel


class UserOut(CamelModel):
    id: int
    email: str
    name: str
    role: UserRole
