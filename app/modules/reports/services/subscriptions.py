"""
Subscription Metrics Service

Business KPIs for the admin dashboard: new subscriptions in a period,
active subscriptions, monthly recurring revenue and reactivations.
"""

from datetime import date
from decimal import Decimal
from typing import Dict
import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from .base import BaseReportService
from app.common.results import QueryResult
from app.modules.subscriptions.models import Subscription, SubscriptionStatusChange, SubscriptionStatus
from app.modules.subscriptions.pricing import round_half_up

logger = logging.getLogger(__name__)

REACTIVATION_SOURCES = [SubscriptionStatus.PAUSED.value, SubscriptionStatus.CANCELLED.value]


class SubscriptionMetricsService(BaseReportService):
    """Service for the admin subscription metrics"""

    def count_new_subscriptions(self, start_date: date, end_date: date) -> int:
        start, end = self._window_bounds(start_date, end_date)
        query = self._get_base_subscription_query(func.count(Subscription.id))
        query = self._apply_date_filter(query, Subscription.created_at, start, end)
        return query.scalar() or 0

    def get_active_totals(self) -> Dict:
        """
        Current active subscriptions and their summed monthly price.
        Not windowed: MRR is a snapshot of what is billed today.
        """
        result = self._get_base_subscription_query(
            func.count(Subscription.id).label('active_subscriptions'),
            func.coalesce(func.sum(Subscription.total_price), 0).label('monthly_recurring_revenue')
        ).filter(
            Subscription.status == SubscriptionStatus.ACTIVE.value
        ).one()

        return {
            "active_subscriptions": int(result.active_subscriptions or 0),
            "monthly_recurring_revenue": int(result.monthly_recurring_revenue or 0)
        }

    def count_reactivations(self, start_date: date, end_date: date) -> int:
        """
        Transitions back to active from paused or cancelled within the window,
        read from the status change history.
        """
        start, end = self._window_bounds(start_date, end_date)
        query = self._get_base_status_change_query(func.count(SubscriptionStatusChange.id)).filter(
            SubscriptionStatusChange.to_status == SubscriptionStatus.ACTIVE.value,
            SubscriptionStatusChange.from_status.in_(REACTIVATION_SOURCES)
        )
        query = self._apply_date_filter(query, SubscriptionStatusChange.changed_at, start, end)
        return query.scalar() or 0

    def get_metrics(self, start_date: date, end_date: date) -> QueryResult[Dict]:
        """
        Generate the admin metrics for a date range.

        Raises ValidationError for an inverted range. Store failures are
        logged and reported as an unavailable result, never as zeros.
        """
        self._validate_date_range(start_date, end_date)

        try:
            new_subscriptions = self.count_new_subscriptions(start_date, end_date)
            totals = self.get_active_totals()
            reactivations = self.count_reactivations(start_date, end_date)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Admin metrics query failed for {start_date}..{end_date}: {e}")
            return QueryResult.unavailable()

        active = totals["active_subscriptions"]
        mrr = totals["monthly_recurring_revenue"]
        average_revenue = round_half_up(Decimal(mrr) / active) if active else 0

        return QueryResult.ok({
            "period_start": start_date,
            "period_end": end_date,
            "new_subscriptions": new_subscriptions,
            "active_subscriptions": active,
            "monthly_recurring_revenue": mrr,
            "reactivations": reactivations,
            "average_revenue_per_user": average_revenue
        })
