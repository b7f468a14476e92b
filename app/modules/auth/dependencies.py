"""
Dependencias de autenticación para FastAPI.

La autenticación la hace el proveedor de identidad externo; aquí solo se
verifica el token recibido y se consulta el rol en user_roles.
"""
from typing import Optional
from uuid import UUID
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import jwt
import logging

from app.database.database import get_db
from app.core.config import settings
from app.modules.auth.models import UserRole
from app.modules.auth.schemas import AuthContext
from app.modules.auth.utils import decode_access_token

logger = logging.getLogger(__name__)

# Security scheme
security = HTTPBearer()


def get_user_role(db: Session, user_id: UUID) -> Optional[str]:
    """Rol del usuario en user_roles, o None si no tiene fila."""
    result = db.execute(select(UserRole.role).where(UserRole.user_id == user_id))
    return result.scalar_one_or_none()


class AuthDependencies:
    """Dependencias de autenticación reutilizables."""

    @staticmethod
    def get_auth_context(
        credentials: HTTPAuthorizationCredentials = Depends(security),
        db: Session = Depends(get_db)
    ) -> AuthContext:
        """
        Obtener el contexto del usuario desde el token del proveedor de identidad.
        """
        credentials_exception = HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

        try:
            payload = decode_access_token(credentials.credentials)
            user_id = UUID(str(payload.get("sub")))
        except (jwt.PyJWTError, ValueError):
            raise credentials_exception

        try:
            role = get_user_role(db, user_id)
        except SQLAlchemyError as e:
            logger.error(f"Role lookup failed for user {user_id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Service temporarily unavailable"
            )

        metadata = payload.get("user_metadata") or {}
        return AuthContext(
            user_id=user_id,
            email=payload.get("email"),
            full_name=metadata.get("full_name"),
            role=role
        )


# Instancias de dependencias
get_auth_context = AuthDependencies.get_auth_context


def require_admin(auth_context: AuthContext = Depends(get_auth_context)) -> AuthContext:
    """
    Dependencia para requerir el rol admin.
    """
    if not auth_context.is_admin:
        logger.warning(f"User {auth_context.user_id} denied access to admin surface")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"The '{settings.ADMIN_ROLE}' role is required"
        )
    return auth_context
