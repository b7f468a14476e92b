"""
Subscription Metrics Router

FastAPI router for the admin dashboard metrics, with optional CSV export.
"""

from datetime import date
from typing import Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.database.database import get_db
from app.common.results import ResultStatus
from app.modules.auth.dependencies import require_admin
from app.modules.auth.schemas import AuthContext

from ..services.subscriptions import SubscriptionMetricsService
from ..schemas import SubscriptionMetricsResponse
from ..utils import create_csv_response, prepare_subscription_metrics_csv, CSV_HEADERS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/metrics", tags=["Admin"])


@router.get("", response_model=None)
async def get_subscription_metrics(
    start_date: Optional[date] = Query(None, description="Start date (default: first day of the current month)"),
    end_date: Optional[date] = Query(None, description="End date, inclusive (default: today)"),
    export: Optional[str] = Query(None, pattern="^(csv)$", description="Export format: csv"),
    auth_context: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Generate the admin subscription metrics for a date range.

    New subscriptions and reactivations are counted inside the range;
    active subscriptions and MRR describe the current state.
    Can export results as CSV.
    """
    today = date.today()
    end_date = end_date or today
    start_date = start_date or end_date.replace(day=1)

    if end_date < start_date:
        raise HTTPException(
            status_code=422,
            detail="end_date must be greater than or equal to start_date"
        )

    service = SubscriptionMetricsService(db)
    result = service.get_metrics(start_date=start_date, end_date=end_date)

    if result.status == ResultStatus.UNAVAILABLE:
        raise HTTPException(status_code=503, detail="Metrics are temporarily unavailable")

    report_data = result.data

    if export == "csv":
        csv_data = prepare_subscription_metrics_csv(report_data)
        filename = f"subscription_metrics_{start_date}_{end_date}.csv"
        logger.info(f"User {auth_context.user_id} exported {filename}")
        return create_csv_response(
            data=csv_data,
            filename=filename,
            headers=CSV_HEADERS["subscription_metrics"]
        )

    return SubscriptionMetricsResponse(**report_data)
