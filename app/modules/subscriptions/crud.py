"""
CRUD operations for subscription management.

Every customer-facing call receives the authenticated user id explicitly;
admin calls pass user_id=None to act on any subscription.
"""
from typing import List, Optional
from uuid import UUID
from datetime import date
import logging

from sqlalchemy import select, and_, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.common.exceptions import PersistenceUnavailable, SubscriptionNotFound
from app.common.mixins import utcnow
from app.common.results import QueryResult
from .catalog import get_plan
from .lifecycle import apply_transition, is_reactivation
from .models import Subscription, SubscriptionStatus, SubscriptionStatusChange, ActorRole
from .pricing import compute_price
from .schemas import SubscriptionCreate

logger = logging.getLogger(__name__)


def _record_status_change(
    db: Session,
    subscription: Subscription,
    from_status: Optional[SubscriptionStatus],
    actor_id: UUID,
    actor_role: ActorRole
) -> SubscriptionStatusChange:
    change = SubscriptionStatusChange(
        subscription=subscription,
        from_status=from_status.value if from_status else None,
        to_status=subscription.status,
        changed_by=actor_id,
        actor_role=ActorRole(actor_role).value,
        changed_at=subscription.updated_at
    )
    db.add(change)
    return change


# ===== SUBSCRIPTION CRUD =====

def create_subscription(
    db: Session,
    user_id: UUID,
    subscription_data: SubscriptionCreate
) -> Subscription:
    """Crear nueva suscripción activa con el precio congelado."""
    plan = get_plan(subscription_data.plan_id)
    if plan is None:
        # El schema ya lo valida; se revisa por si llaman sin pasar por pydantic
        raise ValueError("Plan no encontrado")

    meal_types = [m.value for m in subscription_data.meal_types]
    delivery_days = [d.value for d in subscription_data.delivery_days]
    now = utcnow()

    subscription = Subscription(
        user_id=user_id,
        name=subscription_data.name,
        phone=subscription_data.phone,
        allergies=subscription_data.allergies,
        plan_id=plan.id,
        plan_name=plan.name,
        plan_price=plan.price_per_meal,
        meal_types=meal_types,
        delivery_days=delivery_days,
        total_price=compute_price(plan.id, meal_types, delivery_days),
        status=SubscriptionStatus.ACTIVE.value,
        created_at=now,
        updated_at=now
    )

    try:
        db.add(subscription)
        _record_status_change(db, subscription, None, user_id, ActorRole.CUSTOMER)
        db.commit()
        db.refresh(subscription)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Could not create subscription for user {user_id}: {e}")
        raise PersistenceUnavailable("Could not save the subscription") from e

    logger.info(
        f"Subscription {subscription.id} created for user {user_id}: "
        f"{plan.id}, total {subscription.total_price}"
    )
    return subscription


def list_subscriptions_for_user(
    db: Session,
    user_id: UUID,
    status: Optional[SubscriptionStatus] = None
) -> QueryResult[List[Subscription]]:
    """Suscripciones del usuario, más recientes primero."""
    query = select(Subscription)

    conditions = [Subscription.user_id == user_id]
    if status:
        conditions.append(Subscription.status == SubscriptionStatus(status).value)

    query = query.where(and_(*conditions)).order_by(desc(Subscription.created_at))

    try:
        rows = db.execute(query).scalars().all()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Could not list subscriptions for user {user_id}: {e}")
        return QueryResult.unavailable()

    return QueryResult.from_rows(rows)


def get_subscription(
    db: Session,
    subscription_id: UUID,
    user_id: Optional[UUID] = None,
    with_history: bool = False
) -> Optional[Subscription]:
    """Obtener suscripción por ID (limitada al usuario si se indica)."""
    query = select(Subscription).where(Subscription.id == subscription_id)
    if user_id is not None:
        query = query.where(Subscription.user_id == user_id)
    if with_history:
        query = query.options(selectinload(Subscription.status_changes))

    try:
        return db.execute(query).scalar_one_or_none()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Could not load subscription {subscription_id}: {e}")
        raise PersistenceUnavailable("Could not load the subscription") from e


def update_status(
    db: Session,
    subscription_id: UUID,
    target: SubscriptionStatus,
    actor_id: UUID,
    actor_role: ActorRole = ActorRole.CUSTOMER,
    pause_start: Optional[date] = None,
    pause_end: Optional[date] = None,
    user_id: Optional[UUID] = None
) -> Subscription:
    """
    Aplicar una transición del ciclo de vida y guardarla con su historial.

    Raises:
        SubscriptionNotFound: no existe (o no es del usuario indicado)
        InvalidStatusTransition / ValidationError: transición no permitida
        PersistenceUnavailable: falla de la base de datos
    """
    subscription = get_subscription(db, subscription_id, user_id=user_id)
    if subscription is None:
        raise SubscriptionNotFound(f"Subscription {subscription_id} not found")

    from_status = apply_transition(
        subscription,
        target,
        actor_role=actor_role,
        pause_start=pause_start,
        pause_end=pause_end
    )

    try:
        _record_status_change(db, subscription, from_status, actor_id, actor_role)
        db.commit()
        db.refresh(subscription)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Could not update subscription {subscription_id} to {target}: {e}")
        raise PersistenceUnavailable("Could not update the subscription") from e

    if is_reactivation(from_status.value, subscription.status):
        logger.info(f"Subscription {subscription.id} reactivated from {from_status.value}")
    return subscription
