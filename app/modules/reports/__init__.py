"""
Reports Module - SEA Catering

Admin reporting over the subscription tables. This module creates no
tables of its own; it aggregates existing subscription data.

Architecture Pattern: Service Layer
- routers/ -> FastAPI endpoints with validation
- services/ -> Query logic
- schemas/ -> Pydantic request and response models
- utils/ -> CSV export helpers
"""

from .routers import subscription_metrics_router

__all__ = [
    "subscription_metrics_router"
]
