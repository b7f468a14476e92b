"""
Routers package for Reports module

Exports all report router instances for easy importing.
"""

from .subscriptions import router as subscription_metrics_router

__all__ = [
    "subscription_metrics_router"
]
