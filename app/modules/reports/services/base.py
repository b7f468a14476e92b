"""
Base service class for Reports module

Provides database session handling and the date window helpers shared by
report services.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Tuple

from sqlalchemy import and_
from sqlalchemy.orm import Session

from app.common.exceptions import ValidationError
from app.modules.subscriptions.models import Subscription, SubscriptionStatusChange


class BaseReportService:
    """Base service class for all report services"""

    def __init__(self, db: Session):
        self.db = db

    def _get_base_subscription_query(self, *entities):
        """Get base query over subscriptions"""
        return self.db.query(*entities) if entities else self.db.query(Subscription)

    def _get_base_status_change_query(self, *entities):
        """Get base query over the subscription status history"""
        return self.db.query(*entities) if entities else self.db.query(SubscriptionStatusChange)

    @staticmethod
    def _validate_date_range(start_date: date, end_date: date) -> None:
        if end_date < start_date:
            raise ValidationError("end_date must be greater than or equal to start_date")

    @staticmethod
    def _window_bounds(start_date: date, end_date: date) -> Tuple[datetime, datetime]:
        """
        UTC bounds for calendar dates: [start 00:00, day after end 00:00).
        The end date is included through its last second.
        """
        start = datetime.combine(start_date, time.min, tzinfo=timezone.utc)
        end = datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
        return start, end

    def _apply_date_filter(self, query, date_field, start: datetime, end: datetime):
        """Apply half-open datetime window filter to a query"""
        return query.filter(
            and_(
                date_field >= start,
                date_field < end
            )
        )
