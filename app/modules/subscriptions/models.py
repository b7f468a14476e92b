"""
Models for subscription management.
"""
from sqlalchemy import Column, String, DateTime, Date, Text, Integer, ForeignKey, JSON, Uuid
from sqlalchemy.orm import relationship
from app.database.database import Base
from app.common.mixins import UUIDPrimaryKeyMixin, TimestampMixin, utcnow
from enum import Enum


class SubscriptionStatus(str, Enum):
    """Estados de suscripción."""
    ACTIVE = "active"
    PAUSED = "paused"
    CANCELLED = "cancelled"


class MealType(str, Enum):
    """Comidas que se pueden incluir en la suscripción."""
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"


class DeliveryDay(str, Enum):
    """Días de entrega, en orden de semana."""
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class ActorRole(str, Enum):
    """Quién ejecutó un cambio de estado."""
    CUSTOMER = "customer"
    ADMIN = "admin"


class Subscription(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """
    Suscripción de comidas de un cliente.
    Nunca se elimina: cancelar es un cambio de estado.
    """
    __tablename__ = "subscriptions"

    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)

    # Datos del cliente
    name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=False)
    allergies = Column(Text, nullable=True)

    # Plan (copia del catálogo al momento de crear)
    plan_id = Column(String(20), nullable=False, index=True)
    plan_name = Column(String(100), nullable=False)
    plan_price = Column(Integer, nullable=False)

    # Selecciones
    meal_types = Column(JSON, nullable=False)
    delivery_days = Column(JSON, nullable=False)

    # Precio mensual congelado al crear
    total_price = Column(Integer, nullable=False)

    # Estado
    status = Column(String(20), nullable=False, default=SubscriptionStatus.ACTIVE.value, index=True)
    pause_start_date = Column(Date, nullable=True)
    pause_end_date = Column(Date, nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    # Relaciones
    status_changes = relationship(
        "SubscriptionStatusChange",
        back_populates="subscription",
        order_by="SubscriptionStatusChange.changed_at"
    )

    def __str__(self):
        return f"Subscription {self.plan_name} - {self.status}"


class SubscriptionStatusChange(Base, UUIDPrimaryKeyMixin):
    """
    Historial append-only de cambios de estado.
    from_status es NULL en la fila de creación.
    """
    __tablename__ = "subscription_status_changes"

    subscription_id = Column(Uuid(as_uuid=True), ForeignKey("subscriptions.id"), nullable=False, index=True)
    from_status = Column(String(20), nullable=True)
    to_status = Column(String(20), nullable=False, index=True)
    changed_by = Column(Uuid(as_uuid=True), nullable=False)
    actor_role = Column(String(20), nullable=False, default=ActorRole.CUSTOMER.value)
    changed_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    subscription = relationship("Subscription", back_populates="status_changes")

    def __str__(self):
        return f"{self.from_status or '-'} -> {self.to_status}"
