"""
Ciclo de vida de una suscripción: active -> paused -> active, y cancelled.

Solo decide si una transición es válida y qué campos cambia; guardar el
resultado es trabajo de crud.
"""
from datetime import date, datetime
from typing import Dict, FrozenSet, Optional
import logging

from app.common.exceptions import InvalidStatusTransition, ValidationError
from app.common.mixins import utcnow
from .models import Subscription, SubscriptionStatus, ActorRole

logger = logging.getLogger(__name__)

ACTIVE = SubscriptionStatus.ACTIVE
PAUSED = SubscriptionStatus.PAUSED
CANCELLED = SubscriptionStatus.CANCELLED

# cancelled es terminal para el cliente
CUSTOMER_TRANSITIONS: Dict[SubscriptionStatus, FrozenSet[SubscriptionStatus]] = {
    ACTIVE: frozenset({PAUSED, CANCELLED}),
    PAUSED: frozenset({ACTIVE, CANCELLED}),
    CANCELLED: frozenset(),
}

# El admin además puede reactivar una cancelada
ADMIN_TRANSITIONS: Dict[SubscriptionStatus, FrozenSet[SubscriptionStatus]] = {
    **CUSTOMER_TRANSITIONS,
    CANCELLED: frozenset({ACTIVE}),
}


def allowed_targets(current: SubscriptionStatus, actor_role: ActorRole = ActorRole.CUSTOMER) -> FrozenSet[SubscriptionStatus]:
    table = ADMIN_TRANSITIONS if actor_role == ActorRole.ADMIN else CUSTOMER_TRANSITIONS
    return table[SubscriptionStatus(current)]


def validate_pause_window(start: Optional[date], end: Optional[date]) -> None:
    """Ambas fechas son obligatorias y start <= end."""
    if start is None or end is None:
        raise ValidationError("Pause start date and end date are required")
    if start > end:
        raise ValidationError("Pause start date must be on or before the end date")


def validate_transition(
    current: SubscriptionStatus,
    target: SubscriptionStatus,
    actor_role: ActorRole = ActorRole.CUSTOMER
) -> None:
    current = SubscriptionStatus(current)
    target = SubscriptionStatus(target)

    if current == target:
        raise InvalidStatusTransition(current.value, target.value, "subscription is already in that status")

    if target not in allowed_targets(current, actor_role):
        reason = "cancelled subscriptions cannot be changed" if current == CANCELLED else ""
        raise InvalidStatusTransition(current.value, target.value, reason)


def apply_transition(
    subscription: Subscription,
    target: SubscriptionStatus,
    actor_role: ActorRole = ActorRole.CUSTOMER,
    pause_start: Optional[date] = None,
    pause_end: Optional[date] = None,
    now: Optional[datetime] = None
) -> SubscriptionStatus:
    """
    Validar y aplicar la transición sobre el objeto en memoria.

    Returns:
        El estado anterior, para registrarlo en el historial.
    """
    current = SubscriptionStatus(subscription.status)
    target = SubscriptionStatus(target)
    actor_role = ActorRole(actor_role)
    validate_transition(current, target, actor_role)

    if target == PAUSED:
        validate_pause_window(pause_start, pause_end)

    now = now or utcnow()

    if target == PAUSED:
        subscription.pause_start_date = pause_start
        subscription.pause_end_date = pause_end
    elif target == CANCELLED:
        subscription.pause_start_date = None
        subscription.pause_end_date = None
        subscription.cancelled_at = now
    elif target == ACTIVE:
        subscription.pause_start_date = None
        subscription.pause_end_date = None
        subscription.cancelled_at = None

    subscription.status = target.value
    subscription.touch(now)

    logger.debug(f"Subscription {subscription.id}: {current.value} -> {target.value} by {actor_role.value}")
    return current


def is_reactivation(from_status: Optional[str], to_status: str) -> bool:
    """Volver a active desde paused o cancelled."""
    return to_status == ACTIVE.value and from_status in (PAUSED.value, CANCELLED.value)
