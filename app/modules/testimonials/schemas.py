"""
Pydantic schemas for testimonials.
"""
from typing import List
from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from uuid import UUID

from app.common.validators import require_text


class TestimonialCreate(BaseModel):
    """Schema para enviar un testimonio."""

    customer_name: str = Field(..., max_length=100, description="Nombre del cliente")
    review_message: str = Field(..., max_length=2000, description="Reseña")
    rating: int = Field(..., ge=1, le=5, description="Calificación de 1 a 5")

    @field_validator('customer_name')
    @classmethod
    def validate_customer_name(cls, v):
        return require_text(v, "Name")

    @field_validator('review_message')
    @classmethod
    def validate_review_message(cls, v):
        return require_text(v, "Review message")


class TestimonialOut(BaseModel):
    """Schema de salida para testimonios."""

    id: UUID
    customer_name: str
    review_message: str
    rating: int
    is_approved: bool
    created_at: datetime

    class Config:
        from_attributes = True


class TestimonialList(BaseModel):

    testimonials: List[TestimonialOut]
    total: int
