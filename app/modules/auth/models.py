from sqlalchemy import Column, String, DateTime, Uuid
from app.database.database import Base
from app.common.mixins import utcnow


class UserRole(Base):
    """
    Rol de un usuario del proveedor de identidad.
    Solo lectura desde la API; se administra directamente en la base de datos.
    """
    __tablename__ = "user_roles"

    user_id = Column(Uuid(as_uuid=True), primary_key=True)
    role = Column(String(30), nullable=False, default="customer")  # customer, admin
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __str__(self):
        return f"{self.user_id} ({self.role})"
