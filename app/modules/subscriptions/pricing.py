"""
Helper para el cálculo del precio mensual de una suscripción

precio = precio por comida × tipos de comida × días de entrega × 4.3
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from app.modules.subscriptions.catalog import get_plan

# Semanas promedio por mes
WEEKS_PER_MONTH = Decimal("4.3")


def round_half_up(value: Decimal) -> int:
    """Redondear al entero más cercano; .5 sube."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _distinct(values: Optional[Iterable]) -> set:
    if not values:
        return set()
    return {getattr(v, "value", v) for v in values}


def compute_price(
    plan_id: Optional[str],
    meal_types: Optional[Iterable],
    delivery_days: Optional[Iterable]
) -> int:
    """
    Calcular el precio mensual.

    Args:
        plan_id: ID del plan en el catálogo
        meal_types: Tipos de comida seleccionados (se cuentan sin repetir)
        delivery_days: Días de entrega seleccionados (se cuentan sin repetir)

    Returns:
        Precio mensual en IDR, o 0 si el plan no existe o alguna selección
        está vacía (todavía no se puede calcular).
    """
    plan = get_plan(plan_id)
    meals = _distinct(meal_types)
    days = _distinct(delivery_days)

    if plan is None or not meals or not days:
        return 0

    price = Decimal(plan.price_per_meal) * len(meals) * len(days) * WEEKS_PER_MONTH
    return round_half_up(price)
