"""
Pydantic schemas for Reports module

Defines request and response models for the admin report endpoints.
"""

from datetime import date

from pydantic import BaseModel, Field


class SubscriptionMetricsResponse(BaseModel):
    """Response for the admin subscription metrics"""
    period_start: date
    period_end: date
    new_subscriptions: int = Field(description="Subscriptions created in the period")
    active_subscriptions: int = Field(description="Subscriptions active right now")
    monthly_recurring_revenue: int = Field(description="Sum of total_price over active subscriptions (IDR)")
    reactivations: int = Field(description="Returns to active from paused or cancelled in the period")
    average_revenue_per_user: int = Field(description="MRR / active subscriptions, rounded (IDR)")
