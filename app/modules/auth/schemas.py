from pydantic import BaseModel
from typing import Optional
from uuid import UUID
from app.core.config import settings


class AuthContext(BaseModel):
    """Usuario autenticado por el proveedor de identidad, pasado explícitamente a cada operación."""
    user_id: UUID
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == settings.ADMIN_ROLE


class CurrentUserOut(BaseModel):
    user_id: UUID
    email: Optional[str]
    full_name: Optional[str]
    role: Optional[str]
    is_admin: bool
