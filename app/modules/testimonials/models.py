"""
Models for customer testimonials.
"""
from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, CheckConstraint
from app.database.database import Base
from app.common.mixins import UUIDPrimaryKeyMixin, utcnow


class Testimonial(Base, UUIDPrimaryKeyMixin):
    """
    Reseña enviada por un cliente.
    Se publica solo después de que un admin la aprueba.
    """
    __tablename__ = "testimonials"
    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_testimonials_rating_range"),
    )

    customer_name = Column(String(100), nullable=False)
    review_message = Column(Text, nullable=False)
    rating = Column(Integer, nullable=False)
    is_approved = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def __str__(self):
        return f"{self.customer_name} ({self.rating}/5)"
