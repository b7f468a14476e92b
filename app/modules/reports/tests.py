"""
Tests para las métricas de administración
"""

import pytest
from datetime import date, datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from app.common.exceptions import ValidationError
from app.common.results import ResultStatus
from app.modules.reports.services import SubscriptionMetricsService
from app.modules.subscriptions import crud
from app.modules.subscriptions.models import ActorRole, SubscriptionStatus, SubscriptionStatusChange
from app.modules.subscriptions.schemas import SubscriptionCreate


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def _store_down(*args, **kwargs):
    raise OperationalError("SELECT count(*)", {}, Exception("connection refused"))


def _create(db_session, user_id, data, created_at, **overrides):
    subscription = crud.create_subscription(db_session, user_id, SubscriptionCreate(**{**data, **overrides}))
    subscription.created_at = created_at
    db_session.commit()
    return subscription


def _set_change_time(db_session, subscription_id, from_status, to_status, changed_at):
    change = db_session.execute(
        select(SubscriptionStatusChange).where(
            SubscriptionStatusChange.subscription_id == subscription_id,
            SubscriptionStatusChange.from_status == from_status,
            SubscriptionStatusChange.to_status == to_status
        )
    ).scalar_one()
    change.changed_at = changed_at
    db_session.commit()


@pytest.fixture
def seeded(db_session, customer_id, sample_subscription_data):
    """
    A: protein, creada 2026-03-05, activa (1.032.000)
    B: diet 1x1, creada 2026-03-20, pausada y reanudada el 2026-04-02 (129.000)
    C: protein, creada 2026-02-10, cancelada
    """
    a = _create(db_session, customer_id, sample_subscription_data, _utc(2026, 3, 5, 9, 0))
    b = _create(
        db_session, customer_id, sample_subscription_data, _utc(2026, 3, 20, 14, 30),
        plan_id="diet", meal_types=["lunch"], delivery_days=["monday"]
    )
    c = _create(db_session, customer_id, sample_subscription_data, _utc(2026, 2, 10, 8, 0))

    crud.update_status(
        db_session, b.id, SubscriptionStatus.PAUSED, actor_id=customer_id,
        pause_start=date(2026, 3, 25), pause_end=date(2026, 4, 1)
    )
    crud.update_status(db_session, b.id, SubscriptionStatus.ACTIVE, actor_id=customer_id)
    _set_change_time(db_session, b.id, "active", "paused", _utc(2026, 3, 24, 10, 0))
    _set_change_time(db_session, b.id, "paused", "active", _utc(2026, 4, 2, 10, 0))

    crud.update_status(db_session, c.id, SubscriptionStatus.CANCELLED, actor_id=customer_id)

    return {"a": a, "b": b, "c": c}


class TestSubscriptionMetricsService:
    """Tests para SubscriptionMetricsService"""

    def test_new_subscriptions_in_window(self, db_session, seeded):
        service = SubscriptionMetricsService(db_session)
        assert service.count_new_subscriptions(date(2026, 3, 1), date(2026, 3, 31)) == 2
        assert service.count_new_subscriptions(date(2026, 2, 1), date(2026, 3, 31)) == 3
        assert service.count_new_subscriptions(date(2026, 4, 1), date(2026, 4, 30)) == 0

    def test_end_date_is_inclusive(self, db_session, customer_id, sample_subscription_data):
        _create(db_session, customer_id, sample_subscription_data, _utc(2026, 3, 31, 23, 59, 59))
        _create(db_session, customer_id, sample_subscription_data, _utc(2026, 4, 1, 0, 0))

        service = SubscriptionMetricsService(db_session)
        assert service.count_new_subscriptions(date(2026, 3, 31), date(2026, 3, 31)) == 1
        assert service.count_new_subscriptions(date(2026, 4, 1), date(2026, 4, 1)) == 1

    def test_active_totals(self, db_session, seeded):
        totals = SubscriptionMetricsService(db_session).get_active_totals()
        assert totals == {"active_subscriptions": 2, "monthly_recurring_revenue": 1032000 + 129000}

    def test_active_totals_empty(self, db_session):
        totals = SubscriptionMetricsService(db_session).get_active_totals()
        assert totals == {"active_subscriptions": 0, "monthly_recurring_revenue": 0}

    def test_reactivations_come_from_history(self, db_session, seeded):
        service = SubscriptionMetricsService(db_session)
        assert service.count_reactivations(date(2026, 4, 1), date(2026, 4, 30)) == 1
        assert service.count_reactivations(date(2026, 3, 1), date(2026, 3, 31)) == 0

    def test_admin_reactivation_counts(self, db_session, seeded, admin_id):
        crud.update_status(
            db_session, seeded["c"].id, SubscriptionStatus.ACTIVE,
            actor_id=admin_id, actor_role=ActorRole.ADMIN
        )
        _set_change_time(db_session, seeded["c"].id, "cancelled", "active", _utc(2026, 4, 15, 12, 0))

        service = SubscriptionMetricsService(db_session)
        assert service.count_reactivations(date(2026, 4, 1), date(2026, 4, 30)) == 2

    def test_metrics(self, db_session, seeded):
        result = SubscriptionMetricsService(db_session).get_metrics(date(2026, 3, 1), date(2026, 3, 31))

        assert result.status == ResultStatus.OK
        assert result.data == {
            "period_start": date(2026, 3, 1),
            "period_end": date(2026, 3, 31),
            "new_subscriptions": 2,
            "active_subscriptions": 2,
            "monthly_recurring_revenue": 1161000,
            "reactivations": 0,
            "average_revenue_per_user": 580500
        }

    def test_metrics_with_no_data(self, db_session):
        result = SubscriptionMetricsService(db_session).get_metrics(date(2026, 3, 1), date(2026, 3, 31))
        assert result.status == ResultStatus.OK
        assert result.data["active_subscriptions"] == 0
        assert result.data["average_revenue_per_user"] == 0

    def test_inverted_range(self, db_session):
        with pytest.raises(ValidationError):
            SubscriptionMetricsService(db_session).get_metrics(date(2026, 3, 31), date(2026, 3, 1))

    def test_store_failure_is_unavailable(self, db_session, monkeypatch):
        monkeypatch.setattr(db_session, "query", _store_down)
        result = SubscriptionMetricsService(db_session).get_metrics(date(2026, 3, 1), date(2026, 3, 31))
        assert result.status == ResultStatus.UNAVAILABLE
        assert result.data is None


class TestMetricsAPI:
    """Tests de endpoints API"""

    def test_requires_admin(self, client, auth_headers):
        assert client.get("/admin/metrics", headers=auth_headers).status_code == 403

    def test_metrics(self, client, admin_headers, seeded):
        response = client.get(
            "/admin/metrics",
            params={"start_date": "2026-04-01", "end_date": "2026-04-30"},
            headers=admin_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert data["new_subscriptions"] == 0
        assert data["active_subscriptions"] == 2
        assert data["reactivations"] == 1
        assert data["monthly_recurring_revenue"] == 1161000

    def test_default_window(self, client, admin_headers):
        response = client.get("/admin/metrics", headers=admin_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["period_end"] == date.today().isoformat()
        assert data["period_start"] == date.today().replace(day=1).isoformat()

    def test_inverted_range(self, client, admin_headers):
        response = client.get(
            "/admin/metrics",
            params={"start_date": "2026-04-30", "end_date": "2026-04-01"},
            headers=admin_headers
        )
        assert response.status_code == 422

    def test_unavailable(self, client, admin_headers, db_session, monkeypatch):
        monkeypatch.setattr(db_session, "query", _store_down)
        response = client.get(
            "/admin/metrics",
            params={"start_date": "2026-04-01", "end_date": "2026-04-30"},
            headers=admin_headers
        )
        assert response.status_code == 503

    def test_csv_export(self, client, admin_headers, seeded):
        response = client.get(
            "/admin/metrics",
            params={"start_date": "2026-03-01", "end_date": "2026-03-31", "export": "csv"},
            headers=admin_headers
        )
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "subscription_metrics_2026-03-01_2026-03-31.csv" in response.headers["content-disposition"]

        lines = response.text.strip().splitlines()
        assert lines[0].startswith("Period Start,Period End,New Subscriptions")
        assert lines[1] == "2026-03-01,2026-03-31,2,2,1161000,0,580500"
