"""
Pydantic schemas for subscription management.
"""
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import date, datetime
from uuid import UUID

from app.common.validators import validate_indonesia_phone, clean_phone, normalize_text, require_text
from .models import SubscriptionStatus, MealType, DeliveryDay
from .catalog import PLANS

WEEKDAY_ORDER = {day.value: index for index, day in enumerate(DeliveryDay)}


def _sorted_meal_types(values: List[MealType]) -> List[MealType]:
    order = list(MealType)
    return sorted(set(values), key=order.index)


def _sorted_delivery_days(values: List[DeliveryDay]) -> List[DeliveryDay]:
    return sorted(set(values), key=lambda day: WEEKDAY_ORDER[day.value])


# ===== PLAN SCHEMAS =====

class PlanOut(BaseModel):
    """Schema de salida para planes del catálogo."""
    id: str
    name: str
    price_per_meal: int
    description: str

    class Config:
        from_attributes = True


# ===== PRICE SCHEMAS =====

class PriceQuoteRequest(BaseModel):
    """Selecciones parciales; el precio es 0 mientras falte algo."""
    plan_id: Optional[str] = Field(None, description="ID del plan")
    meal_types: List[MealType] = Field(default_factory=list)
    delivery_days: List[DeliveryDay] = Field(default_factory=list)


class PriceQuoteOut(BaseModel):
    plan_id: Optional[str]
    price_per_meal: Optional[int]
    meal_type_count: int
    delivery_day_count: int
    total_price: int = Field(description="Precio mensual en IDR (0 = incompleto)")
    is_complete: bool


# ===== SUBSCRIPTION SCHEMAS =====

class SubscriptionCreate(BaseModel):
    """Schema para crear suscripción. Un status enviado por el cliente se ignora."""
    name: str = Field(..., max_length=100, description="Nombre del cliente")
    phone: str = Field(..., max_length=20, description="Teléfono 08xxxxxxxxxx")
    plan_id: str = Field(..., description="diet, protein o royal")
    meal_types: List[MealType] = Field(..., description="Al menos un tipo de comida")
    delivery_days: List[DeliveryDay] = Field(..., description="Al menos un día de entrega")
    allergies: Optional[str] = Field(None, max_length=1000)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        return require_text(v, "Name")

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        cleaned = clean_phone(v or "")
        if not validate_indonesia_phone(cleaned):
            raise ValueError(
                'Invalid phone number. Use the Indonesian format 08xxxxxxxxx '
                '(08 followed by 8 to 11 digits)'
            )
        return cleaned

    @field_validator('plan_id')
    @classmethod
    def validate_plan(cls, v):
        if v not in PLANS:
            raise ValueError(f"Unknown plan '{v}'. Valid plans: {', '.join(PLANS)}")
        return v

    @field_validator('meal_types')
    @classmethod
    def validate_meal_types(cls, v):
        if not v:
            raise ValueError("Select at least one meal type")
        return _sorted_meal_types(v)

    @field_validator('delivery_days')
    @classmethod
    def validate_delivery_days(cls, v):
        if not v:
            raise ValueError("Select at least one delivery day")
        return _sorted_delivery_days(v)

    @field_validator('allergies')
    @classmethod
    def validate_allergies(cls, v):
        return normalize_text(v)


class PauseRequest(BaseModel):
    """Ventana de pausa; ambas fechas obligatorias."""
    start_date: date
    end_date: date

    @model_validator(mode='after')
    def validate_window(self):
        if self.start_date > self.end_date:
            raise ValueError('start_date must be on or before end_date')
        return self


class AdminStatusUpdate(BaseModel):
    """Cambio de estado desde el panel de administración."""
    status: SubscriptionStatus
    pause_start_date: Optional[date] = None
    pause_end_date: Optional[date] = None


class SubscriptionOut(BaseModel):
    """Schema de salida para suscripciones."""
    id: UUID
    user_id: UUID
    name: str
    phone: str
    plan_id: str
    plan_name: str
    plan_price: int
    meal_types: List[MealType]
    delivery_days: List[DeliveryDay]
    allergies: Optional[str]
    total_price: int
    status: SubscriptionStatus
    pause_start_date: Optional[date]
    pause_end_date: Optional[date]
    cancelled_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class StatusChangeOut(BaseModel):
    from_status: Optional[SubscriptionStatus]
    to_status: SubscriptionStatus
    changed_by: UUID
    actor_role: str
    changed_at: datetime

    class Config:
        from_attributes = True


class SubscriptionDetail(SubscriptionOut):
    """Schema detallado con historial de estados."""
    status_changes: List[StatusChangeOut] = []

    class Config:
        from_attributes = True


# ===== LIST SCHEMAS =====

class SubscriptionList(BaseModel):
    """Schema para lista de suscripciones."""
    subscriptions: List[SubscriptionOut]
    total: int
