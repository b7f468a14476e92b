"""
Services package for Reports module

Exports all report service classes for easy importing.
"""

from .subscriptions import SubscriptionMetricsService

__all__ = [
    "SubscriptionMetricsService"
]
