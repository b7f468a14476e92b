"""
Utilities for Reports module

Provides CSV export functionality for report responses.
"""

import csv
import io
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List

from fastapi import Response


def create_csv_response(
    data: List[Dict[str, Any]],
    filename: str,
    headers: Dict[str, str] = None
) -> Response:
    """
    Create a CSV response from a list of dictionaries.

    Args:
        data: List of dictionaries with report data
        filename: Name for the CSV file
        headers: Optional mapping of field names to CSV headers

    Returns:
        FastAPI Response with CSV content
    """
    fieldnames = list(headers.keys()) if headers else (list(data[0].keys()) if data else [])
    csv_headers = list(headers.values()) if headers else fieldnames

    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=fieldnames, extrasaction="ignore")
    writer.writerow(dict(zip(fieldnames, csv_headers)))
    for row in data:
        writer.writerow({key: format_csv_value(value) for key, value in row.items()})

    csv_content = output.getvalue()
    output.close()

    return Response(
        content=csv_content,
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename={filename}"
        }
    )


def format_csv_value(value: Any) -> str:
    """
    Format a value for CSV export.
    """
    if value is None:
        return ""
    elif isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, (date, datetime)):
        return value.isoformat()
    elif isinstance(value, bool):
        return "Yes" if value else "No"
    else:
        return str(value)


def prepare_subscription_metrics_csv(report_data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Prepare subscription metrics for CSV export"""
    return [{field: report_data[field] for field in CSV_HEADERS["subscription_metrics"]}]


CSV_HEADERS = {
    "subscription_metrics": {
        "period_start": "Period Start",
        "period_end": "Period End",
        "new_subscriptions": "New Subscriptions",
        "active_subscriptions": "Active Subscriptions",
        "monthly_recurring_revenue": "MRR (IDR)",
        "reactivations": "Reactivations",
        "average_revenue_per_user": "ARPU (IDR)"
    }
}
