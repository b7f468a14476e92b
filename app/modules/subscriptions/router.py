"""
API Router for subscription management.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from uuid import UUID
import logging

from app.database.database import get_db
from app.common.exceptions import (
    InvalidStatusTransition, PersistenceUnavailable, SubscriptionNotFound
)
from app.common.results import ResultStatus
from app.modules.auth.dependencies import get_auth_context, require_admin
from app.modules.auth.schemas import AuthContext

from . import crud, schemas
from .catalog import get_plan, list_plans
from .models import SubscriptionStatus, ActorRole
from .pricing import compute_price

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/subscriptions",
    tags=["Subscriptions"],
    responses={404: {"description": "Not found"}}
)

admin_router = APIRouter(
    prefix="/admin/subscriptions",
    tags=["Admin"],
    responses={404: {"description": "Not found"}}
)


def _raise_for_domain_error(exc: Exception):
    """Traducir excepciones de dominio a HTTPException."""
    if isinstance(exc, SubscriptionNotFound):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subscription not found")
    if isinstance(exc, InvalidStatusTransition):
        logger.warning(f"Rejected status change: {exc}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, ValueError):
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    if isinstance(exc, PersistenceUnavailable):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service temporarily unavailable. Please try again."
        )
    raise exc


# ===== PLAN & PRICE ENDPOINTS =====

@router.get("/plans", response_model=List[schemas.PlanOut])
async def get_plans():
    """
    Obtener lista de planes disponibles.

    Este endpoint es público y no requiere autenticación.
    """
    return list_plans()


@router.post("/quote", response_model=schemas.PriceQuoteOut)
async def quote_price(quote: schemas.PriceQuoteRequest):
    """
    Calcular el precio mensual para las selecciones actuales.

    Devuelve total_price = 0 mientras falte el plan o alguna selección;
    no se debe permitir enviar la suscripción con ese valor.
    """
    plan = get_plan(quote.plan_id)
    meal_count = len(set(quote.meal_types))
    day_count = len(set(quote.delivery_days))
    total_price = compute_price(quote.plan_id, quote.meal_types, quote.delivery_days)

    return schemas.PriceQuoteOut(
        plan_id=quote.plan_id,
        price_per_meal=plan.price_per_meal if plan else None,
        meal_type_count=meal_count,
        delivery_day_count=day_count,
        total_price=total_price,
        is_complete=total_price > 0
    )


# ===== SUBSCRIPTION ENDPOINTS =====

@router.get("/", response_model=schemas.SubscriptionList)
async def get_subscriptions(
    status_filter: Optional[SubscriptionStatus] = Query(None, alias="status", description="Filtrar por estado"),
    auth_context: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db)
):
    """
    Obtener las suscripciones del usuario, más recientes primero.
    """
    result = crud.list_subscriptions_for_user(db, auth_context.user_id, status=status_filter)

    if result.status == ResultStatus.UNAVAILABLE:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Subscriptions are temporarily unavailable"
        )

    return schemas.SubscriptionList(subscriptions=result.data, total=len(result.data))


@router.post("/", response_model=schemas.SubscriptionOut, status_code=status.HTTP_201_CREATED)
async def create_subscription(
    subscription_data: schemas.SubscriptionCreate,
    auth_context: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db)
):
    """
    Crear nueva suscripción.

    **Nota:** el estado siempre inicia en active y el precio se calcula en el servidor.
    """
    try:
        return crud.create_subscription(db, auth_context.user_id, subscription_data)
    except (ValueError, PersistenceUnavailable) as e:
        _raise_for_domain_error(e)


@router.get("/{subscription_id}", response_model=schemas.SubscriptionDetail)
async def get_subscription(
    subscription_id: UUID,
    auth_context: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db)
):
    """
    Obtener detalles de una suscripción con su historial de estados.
    """
    try:
        subscription = crud.get_subscription(
            db, subscription_id, user_id=auth_context.user_id, with_history=True
        )
    except PersistenceUnavailable as e:
        _raise_for_domain_error(e)

    if not subscription:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Subscription not found"
        )
    return subscription


@router.post("/{subscription_id}/pause", response_model=schemas.SubscriptionOut)
async def pause_subscription(
    subscription_id: UUID,
    pause: schemas.PauseRequest,
    auth_context: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db)
):
    """
    Pausar una suscripción activa entre dos fechas.
    """
    try:
        return crud.update_status(
            db,
            subscription_id,
            SubscriptionStatus.PAUSED,
            actor_id=auth_context.user_id,
            pause_start=pause.start_date,
            pause_end=pause.end_date,
            user_id=auth_context.user_id
        )
    except (LookupError, ValueError, PersistenceUnavailable) as e:
        _raise_for_domain_error(e)


@router.post("/{subscription_id}/resume", response_model=schemas.SubscriptionOut)
async def resume_subscription(
    subscription_id: UUID,
    auth_context: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db)
):
    """
    Reanudar una suscripción pausada.
    """
    try:
        return crud.update_status(
            db,
            subscription_id,
            SubscriptionStatus.ACTIVE,
            actor_id=auth_context.user_id,
            user_id=auth_context.user_id
        )
    except (LookupError, ValueError, PersistenceUnavailable) as e:
        _raise_for_domain_error(e)


@router.post("/{subscription_id}/cancel", response_model=schemas.SubscriptionOut)
async def cancel_subscription(
    subscription_id: UUID,
    auth_context: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db)
):
    """
    Cancelar una suscripción. No se puede deshacer desde la cuenta del cliente.
    """
    try:
        return crud.update_status(
            db,
            subscription_id,
            SubscriptionStatus.CANCELLED,
            actor_id=auth_context.user_id,
            user_id=auth_context.user_id
        )
    except (LookupError, ValueError, PersistenceUnavailable) as e:
        _raise_for_domain_error(e)


# ===== ADMIN ENDPOINTS =====

@admin_router.patch("/{subscription_id}/status", response_model=schemas.SubscriptionOut)
async def admin_update_status(
    subscription_id: UUID,
    update: schemas.AdminStatusUpdate,
    auth_context: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Cambiar el estado de cualquier suscripción, incluida la reactivación
    de una cancelada.
    """
    try:
        return crud.update_status(
            db,
            subscription_id,
            update.status,
            actor_id=auth_context.user_id,
            actor_role=ActorRole.ADMIN,
            pause_start=update.pause_start_date,
            pause_end=update.pause_end_date
        )
    except (LookupError, ValueError, PersistenceUnavailable) as e:
        _raise_for_domain_error(e)
