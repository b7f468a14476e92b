"""
Subscription management module.

Meal subscriptions: plan catalog, monthly price calculation, the
active/paused/cancelled lifecycle and its status change history.
"""

from .models import (
    Subscription, SubscriptionStatusChange, SubscriptionStatus,
    MealType, DeliveryDay, ActorRole
)
from .schemas import (
    PlanOut, PriceQuoteRequest, PriceQuoteOut,
    SubscriptionCreate, SubscriptionOut, SubscriptionDetail, SubscriptionList,
    PauseRequest, AdminStatusUpdate
)
from .pricing import compute_price
from . import crud, router

__all__ = [
    # Models
    "Subscription",
    "SubscriptionStatusChange",
    "SubscriptionStatus",
    "MealType",
    "DeliveryDay",
    "ActorRole",

    # Schemas
    "PlanOut",
    "PriceQuoteRequest",
    "PriceQuoteOut",
    "SubscriptionCreate",
    "SubscriptionOut",
    "SubscriptionDetail",
    "SubscriptionList",
    "PauseRequest",
    "AdminStatusUpdate",

    # Pricing
    "compute_price",

    # Modules
    "crud",
    "router"
]
