"""
API Router for testimonials.
"""
from fastapi import APIRouter, HTTPException, status, Query
from uuid import UUID

from app.dependencies.dbDependecies import db_dependency
from app.dependencies.userDependencies import admin_dependency
from app.common.exceptions import PersistenceUnavailable, TestimonialNotFound
from app.common.results import ResultStatus

from . import crud, schemas

router = APIRouter(
    prefix="/testimonials",
    tags=["Testimonials"]
)

admin_router = APIRouter(
    prefix="/admin/testimonials",
    tags=["Admin"],
    responses={404: {"description": "Not found"}}
)

UNAVAILABLE_DETAIL = "Service temporarily unavailable. Please try again."


@router.post("/", response_model=schemas.TestimonialOut, status_code=status.HTTP_201_CREATED)
async def submit_testimonial(testimonial_data: schemas.TestimonialCreate, db: db_dependency):
    """
    Enviar un testimonio. Queda pendiente hasta que un admin lo revise.
    """
    try:
        return crud.create_testimonial(db, testimonial_data)
    except PersistenceUnavailable:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=UNAVAILABLE_DETAIL)


@router.get("/", response_model=schemas.TestimonialList)
async def get_testimonials(
    db: db_dependency,
    limit: int = Query(10, ge=1, le=50, description="Número máximo de testimonios")
):
    """
    Testimonios aprobados para la página principal.
    """
    result = crud.list_approved_testimonials(db, limit=limit)
    if result.status == ResultStatus.UNAVAILABLE:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=UNAVAILABLE_DETAIL)

    return schemas.TestimonialList(testimonials=result.data, total=len(result.data))


@admin_router.post("/{testimonial_id}/approve", response_model=schemas.TestimonialOut)
async def approve_testimonial(testimonial_id: UUID, auth_context: admin_dependency, db: db_dependency):
    """
    Aprobar un testimonio para publicarlo.
    """
    try:
        return crud.approve_testimonial(db, testimonial_id)
    except TestimonialNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Testimonial not found")
    except PersistenceUnavailable:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=UNAVAILABLE_DETAIL)
