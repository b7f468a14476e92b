"""
CRUD operations for testimonials.
"""
from typing import List
from uuid import UUID
import logging

from sqlalchemy import select, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.common.exceptions import PersistenceUnavailable, TestimonialNotFound
from app.common.results import QueryResult
from .models import Testimonial
from .schemas import TestimonialCreate

logger = logging.getLogger(__name__)


def create_testimonial(db: Session, testimonial_data: TestimonialCreate) -> Testimonial:
    """Guardar un testimonio pendiente de revisión."""
    testimonial = Testimonial(**testimonial_data.model_dump(), is_approved=False)

    try:
        db.add(testimonial)
        db.commit()
        db.refresh(testimonial)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Could not save testimonial: {e}")
        raise PersistenceUnavailable("Could not save the testimonial") from e

    logger.info(f"Testimonial {testimonial.id} submitted ({testimonial.rating}/5), pending review")
    return testimonial


def list_approved_testimonials(db: Session, limit: int = 10) -> QueryResult[List[Testimonial]]:
    """Testimonios aprobados, más recientes primero."""
    query = (
        select(Testimonial)
        .where(Testimonial.is_approved.is_(True))
        .order_by(desc(Testimonial.created_at))
        .limit(limit)
    )

    try:
        rows = db.execute(query).scalars().all()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Could not list testimonials: {e}")
        return QueryResult.unavailable()

    return QueryResult.from_rows(rows)


def approve_testimonial(db: Session, testimonial_id: UUID) -> Testimonial:
    """Publicar un testimonio."""
    try:
        testimonial = db.execute(
            select(Testimonial).where(Testimonial.id == testimonial_id)
        ).scalar_one_or_none()

        if testimonial is None:
            raise TestimonialNotFound(f"Testimonial {testimonial_id} not found")

        testimonial.is_approved = True
        db.commit()
        db.refresh(testimonial)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Could not approve testimonial {testimonial_id}: {e}")
        raise PersistenceUnavailable("Could not update the testimonial") from e

    return testimonial
