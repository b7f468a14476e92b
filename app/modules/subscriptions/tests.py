"""
Tests para el módulo de Suscripciones

Cubren:
- Cálculo de precio mensual
- Ciclo de vida active / paused / cancelled
- CRUD con historial de estados y fallas de base de datos
- Endpoints del cliente y del admin
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from app.common.exceptions import InvalidStatusTransition, PersistenceUnavailable, SubscriptionNotFound
from app.common import exceptions
from app.common.results import ResultStatus
from app.modules.subscriptions import crud, lifecycle
from app.modules.subscriptions.models import (
    Subscription, SubscriptionStatusChange, SubscriptionStatus, ActorRole
)
from app.modules.subscriptions.pricing import compute_price, round_half_up
from app.modules.subscriptions.schemas import SubscriptionCreate


def _store_down(*args, **kwargs):
    raise OperationalError("SELECT 1", {}, Exception("connection refused"))


@pytest.fixture
def subscription(db_session, customer_id, sample_subscription_data):
    return crud.create_subscription(db_session, customer_id, SubscriptionCreate(**sample_subscription_data))


# ===== TESTS DE PRECIO =====

class TestPricing:
    """Tests para compute_price"""

    def test_protein_two_meals_three_days(self):
        assert compute_price("protein", ["breakfast", "dinner"], ["monday", "wednesday", "friday"]) == 1032000

    def test_other_plans(self):
        assert compute_price("diet", ["lunch"], ["monday"]) == 129000
        assert compute_price(
            "royal",
            ["breakfast", "lunch", "dinner"],
            ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
        ) == 5418000

    def test_empty_selection_is_zero(self):
        assert compute_price("protein", [], ["monday"]) == 0
        assert compute_price("protein", ["lunch"], []) == 0
        assert compute_price("unknown", [], []) == 0

    def test_unknown_or_missing_plan_is_zero(self):
        assert compute_price("platinum", ["lunch"], ["monday"]) == 0
        assert compute_price(None, ["lunch"], ["monday"]) == 0

    def test_duplicates_count_once(self):
        assert compute_price("diet", ["lunch", "lunch"], ["monday", "monday"]) == 129000

    def test_round_half_up(self):
        assert round_half_up(Decimal("2.5")) == 3
        assert round_half_up(Decimal("2.4")) == 2
        assert round_half_up(Decimal("1032000.0")) == 1032000


# ===== TESTS DE CICLO DE VIDA =====

class TestLifecycle:
    """Tests para las transiciones de estado"""

    def _subscription(self, status=SubscriptionStatus.ACTIVE):
        return Subscription(id=uuid4(), status=status.value)

    def test_pause_requires_both_dates(self):
        sub = self._subscription()
        with pytest.raises(exceptions.ValidationError):
            lifecycle.apply_transition(sub, SubscriptionStatus.PAUSED, pause_start=date(2026, 5, 1))
        assert sub.status == "active"

    def test_pause_rejects_inverted_window(self):
        sub = self._subscription()
        with pytest.raises(exceptions.ValidationError):
            lifecycle.apply_transition(
                sub, SubscriptionStatus.PAUSED,
                pause_start=date(2026, 5, 10), pause_end=date(2026, 5, 1)
            )

    def test_pause_stores_window(self):
        sub = self._subscription()
        previous = lifecycle.apply_transition(
            sub, SubscriptionStatus.PAUSED,
            pause_start=date(2026, 5, 1), pause_end=date(2026, 5, 14)
        )
        assert previous == SubscriptionStatus.ACTIVE
        assert sub.status == "paused"
        assert sub.pause_start_date == date(2026, 5, 1)
        assert sub.pause_end_date == date(2026, 5, 14)
        assert sub.updated_at is not None

    def test_resume_clears_window(self):
        sub = self._subscription(SubscriptionStatus.PAUSED)
        sub.pause_start_date = date(2026, 5, 1)
        sub.pause_end_date = date(2026, 5, 14)
        lifecycle.apply_transition(sub, SubscriptionStatus.ACTIVE)
        assert sub.status == "active"
        assert sub.pause_start_date is None
        assert sub.pause_end_date is None

    @pytest.mark.parametrize("source", [SubscriptionStatus.ACTIVE, SubscriptionStatus.PAUSED])
    def test_cancel_from_active_or_paused(self, source):
        sub = self._subscription(source)
        lifecycle.apply_transition(sub, SubscriptionStatus.CANCELLED)
        assert sub.status == "cancelled"
        assert sub.cancelled_at is not None

    @pytest.mark.parametrize("target", list(SubscriptionStatus))
    def test_cancelled_is_terminal_for_customers(self, target):
        sub = self._subscription(SubscriptionStatus.CANCELLED)
        with pytest.raises(InvalidStatusTransition):
            lifecycle.apply_transition(
                sub, target, pause_start=date(2026, 5, 1), pause_end=date(2026, 5, 2)
            )
        assert sub.status == "cancelled"

    def test_admin_can_reactivate_cancelled(self):
        sub = self._subscription(SubscriptionStatus.CANCELLED)
        lifecycle.apply_transition(sub, SubscriptionStatus.ACTIVE, actor_role=ActorRole.ADMIN)
        assert sub.status == "active"
        assert sub.cancelled_at is None

    def test_same_status_is_rejected(self):
        with pytest.raises(InvalidStatusTransition):
            lifecycle.validate_transition(SubscriptionStatus.ACTIVE, SubscriptionStatus.ACTIVE)

    def test_paused_cannot_be_paused_again(self):
        with pytest.raises(InvalidStatusTransition):
            lifecycle.validate_transition(SubscriptionStatus.PAUSED, SubscriptionStatus.PAUSED)

    def test_is_reactivation(self):
        assert lifecycle.is_reactivation("paused", "active")
        assert lifecycle.is_reactivation("cancelled", "active")
        assert not lifecycle.is_reactivation(None, "active")
        assert not lifecycle.is_reactivation("active", "paused")


# ===== TESTS DE SCHEMAS =====

class TestSubscriptionCreateSchema:
    """Validaciones antes de tocar la base de datos"""

    def test_valid_payload_is_normalized(self, sample_subscription_data):
        data = SubscriptionCreate(**{
            **sample_subscription_data,
            "name": "  Budi Santoso ",
            "meal_types": ["dinner", "breakfast", "dinner"],
            "delivery_days": ["friday", "monday"],
            "allergies": "   ",
        })
        assert data.name == "Budi Santoso"
        assert [m.value for m in data.meal_types] == ["breakfast", "dinner"]
        assert [d.value for d in data.delivery_days] == ["monday", "friday"]
        assert data.allergies is None

    @pytest.mark.parametrize("field,value", [
        ("phone", "1234567890"),
        ("phone", "08123"),
        ("name", "   "),
        ("plan_id", "platinum"),
        ("meal_types", []),
        ("delivery_days", []),
        ("meal_types", ["brunch"]),
        ("delivery_days", ["someday"]),
    ])
    def test_invalid_payload(self, sample_subscription_data, field, value):
        from pydantic import ValidationError
        with pytest.raises(ValidationError):
            SubscriptionCreate(**{**sample_subscription_data, field: value})


# ===== TESTS DE CRUD =====

class TestSubscriptionCrud:
    """Tests para crud de suscripciones"""

    def test_create_snapshots_price_and_forces_active(self, subscription, customer_id):
        assert subscription.id is not None
        assert subscription.user_id == customer_id
        assert subscription.status == "active"
        assert subscription.plan_name == "Protein Plan"
        assert subscription.plan_price == 40000
        assert subscription.total_price == 1032000
        assert subscription.meal_types == ["breakfast", "dinner"]
        assert subscription.delivery_days == ["monday", "wednesday", "friday"]
        assert subscription.created_at is not None

    def test_create_records_initial_status_change(self, db_session, subscription):
        changes = db_session.execute(
            select(SubscriptionStatusChange).where(SubscriptionStatusChange.subscription_id == subscription.id)
        ).scalars().all()
        assert len(changes) == 1
        assert changes[0].from_status is None
        assert changes[0].to_status == "active"

    def test_create_store_failure(self, db_session, customer_id, sample_subscription_data, monkeypatch):
        monkeypatch.setattr(db_session, "commit", _store_down)
        with pytest.raises(PersistenceUnavailable):
            crud.create_subscription(db_session, customer_id, SubscriptionCreate(**sample_subscription_data))

    def test_list_is_scoped_and_newest_first(self, db_session, customer_id, other_customer_id, sample_subscription_data):
        first = crud.create_subscription(db_session, customer_id, SubscriptionCreate(**sample_subscription_data))
        second = crud.create_subscription(
            db_session, customer_id, SubscriptionCreate(**{**sample_subscription_data, "plan_id": "diet"})
        )
        crud.create_subscription(db_session, other_customer_id, SubscriptionCreate(**sample_subscription_data))

        result = crud.list_subscriptions_for_user(db_session, customer_id)

        assert result.status == ResultStatus.OK
        assert [s.id for s in result.data] == [second.id, first.id]

    def test_list_empty(self, db_session, customer_id):
        result = crud.list_subscriptions_for_user(db_session, customer_id)
        assert result.status == ResultStatus.EMPTY
        assert result.data == []

    def test_list_store_failure_is_unavailable(self, db_session, customer_id, monkeypatch):
        monkeypatch.setattr(db_session, "execute", _store_down)
        result = crud.list_subscriptions_for_user(db_session, customer_id)
        assert result.status == ResultStatus.UNAVAILABLE
        assert not result.is_available

    def test_pause_resume_round_trip(self, db_session, subscription, customer_id):
        fields = [
            "user_id", "name", "phone", "allergies", "plan_id", "plan_name", "plan_price",
            "meal_types", "delivery_days", "total_price", "status",
            "pause_start_date", "pause_end_date", "cancelled_at", "created_at"
        ]
        before = {field: getattr(subscription, field) for field in fields}
        updated_before = subscription.updated_at

        crud.update_status(
            db_session, subscription.id, SubscriptionStatus.PAUSED, actor_id=customer_id,
            pause_start=date(2026, 5, 1), pause_end=date(2026, 5, 14), user_id=customer_id
        )
        resumed = crud.update_status(
            db_session, subscription.id, SubscriptionStatus.ACTIVE, actor_id=customer_id, user_id=customer_id
        )

        assert {field: getattr(resumed, field) for field in fields} == before
        assert resumed.updated_at >= updated_before

    def test_transitions_are_logged(self, db_session, subscription, customer_id):
        crud.update_status(
            db_session, subscription.id, SubscriptionStatus.PAUSED, actor_id=customer_id,
            pause_start=date(2026, 5, 1), pause_end=date(2026, 5, 14)
        )
        crud.update_status(db_session, subscription.id, SubscriptionStatus.CANCELLED, actor_id=customer_id)

        loaded = crud.get_subscription(db_session, subscription.id, with_history=True)
        assert [(c.from_status, c.to_status) for c in loaded.status_changes] == [
            (None, "active"), ("active", "paused"), ("paused", "cancelled")
        ]

    def test_update_other_users_subscription_not_found(self, db_session, subscription, other_customer_id):
        with pytest.raises(SubscriptionNotFound):
            crud.update_status(
                db_session, subscription.id, SubscriptionStatus.CANCELLED,
                actor_id=other_customer_id, user_id=other_customer_id
            )

    def test_update_store_failure(self, db_session, subscription, customer_id, monkeypatch):
        monkeypatch.setattr(db_session, "commit", _store_down)
        with pytest.raises(PersistenceUnavailable):
            crud.update_status(db_session, subscription.id, SubscriptionStatus.CANCELLED, actor_id=customer_id)

    def test_admin_reactivation(self, db_session, subscription, customer_id, admin_id):
        crud.update_status(db_session, subscription.id, SubscriptionStatus.CANCELLED, actor_id=customer_id)
        reactivated = crud.update_status(
            db_session, subscription.id, SubscriptionStatus.ACTIVE,
            actor_id=admin_id, actor_role=ActorRole.ADMIN
        )
        assert reactivated.status == "active"
        assert reactivated.cancelled_at is None


# ===== TESTS DE API ENDPOINTS =====

class TestSubscriptionAPI:
    """Tests de endpoints API"""

    def test_plans_are_public(self, client):
        response = client.get("/subscriptions/plans")
        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == ["diet", "protein", "royal"]

    def test_quote(self, client):
        response = client.post("/subscriptions/quote", json={
            "plan_id": "protein",
            "meal_types": ["breakfast", "dinner"],
            "delivery_days": ["monday", "wednesday", "friday"],
        })
        assert response.status_code == 200
        data = response.json()
        assert data["total_price"] == 1032000
        assert data["is_complete"] is True

    def test_incomplete_quote_is_zero(self, client):
        response = client.post("/subscriptions/quote", json={"plan_id": "protein", "meal_types": ["lunch"]})
        assert response.status_code == 200
        assert response.json()["total_price"] == 0
        assert response.json()["is_complete"] is False

    def test_create_requires_auth(self, client, sample_subscription_data):
        response = client.post("/subscriptions/", json=sample_subscription_data)
        assert response.status_code in (401, 403)

    def test_create_ignores_client_status(self, client, auth_headers, sample_subscription_data):
        response = client.post(
            "/subscriptions/",
            json={**sample_subscription_data, "status": "cancelled", "total_price": 1},
            headers=auth_headers
        )
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "active"
        assert data["total_price"] == 1032000

    def test_create_invalid_phone(self, client, auth_headers, sample_subscription_data):
        response = client.post(
            "/subscriptions/", json={**sample_subscription_data, "phone": "1234567890"}, headers=auth_headers
        )
        assert response.status_code == 422

    def test_list_and_detail(self, client, auth_headers, other_auth_headers, sample_subscription_data):
        created = client.post("/subscriptions/", json=sample_subscription_data, headers=auth_headers).json()

        listing = client.get("/subscriptions/", headers=auth_headers)
        assert listing.status_code == 200
        assert listing.json()["total"] == 1

        detail = client.get(f"/subscriptions/{created['id']}", headers=auth_headers)
        assert detail.status_code == 200
        assert detail.json()["status_changes"][0]["to_status"] == "active"

        assert client.get("/subscriptions/", headers=other_auth_headers).json()["total"] == 0
        assert client.get(f"/subscriptions/{created['id']}", headers=other_auth_headers).status_code == 404

    def test_pause_resume_cancel_flow(self, client, auth_headers, sample_subscription_data):
        sub_id = client.post("/subscriptions/", json=sample_subscription_data, headers=auth_headers).json()["id"]

        paused = client.post(
            f"/subscriptions/{sub_id}/pause",
            json={"start_date": "2026-05-01", "end_date": "2026-05-14"},
            headers=auth_headers
        )
        assert paused.status_code == 200
        assert paused.json()["status"] == "paused"
        assert paused.json()["pause_end_date"] == "2026-05-14"

        resumed = client.post(f"/subscriptions/{sub_id}/resume", headers=auth_headers)
        assert resumed.json()["status"] == "active"

        cancelled = client.post(f"/subscriptions/{sub_id}/cancel", headers=auth_headers)
        assert cancelled.json()["status"] == "cancelled"

        again = client.post(f"/subscriptions/{sub_id}/resume", headers=auth_headers)
        assert again.status_code == 409

    def test_pause_with_inverted_dates(self, client, auth_headers, sample_subscription_data):
        sub_id = client.post("/subscriptions/", json=sample_subscription_data, headers=auth_headers).json()["id"]
        response = client.post(
            f"/subscriptions/{sub_id}/pause",
            json={"start_date": "2026-05-14", "end_date": "2026-05-01"},
            headers=auth_headers
        )
        assert response.status_code == 422

    def test_list_unavailable(self, client, auth_headers, db_session, monkeypatch):
        original_execute = db_session.execute

        def execute(statement, *args, **kwargs):
            # Deja pasar la consulta de roles de la autenticación
            if "subscriptions" in str(statement):
                _store_down()
            return original_execute(statement, *args, **kwargs)

        monkeypatch.setattr(db_session, "execute", execute)
        response = client.get("/subscriptions/", headers=auth_headers)
        assert response.status_code == 503

    def test_admin_status_requires_admin(self, client, auth_headers, sample_subscription_data):
        sub_id = client.post("/subscriptions/", json=sample_subscription_data, headers=auth_headers).json()["id"]
        response = client.patch(
            f"/admin/subscriptions/{sub_id}/status", json={"status": "cancelled"}, headers=auth_headers
        )
        assert response.status_code == 403

    def test_admin_reactivates_cancelled(self, client, auth_headers, admin_headers, sample_subscription_data):
        sub_id = client.post("/subscriptions/", json=sample_subscription_data, headers=auth_headers).json()["id"]
        client.post(f"/subscriptions/{sub_id}/cancel", headers=auth_headers)

        response = client.patch(
            f"/admin/subscriptions/{sub_id}/status", json={"status": "active"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["status"] == "active"

    def test_admin_unknown_subscription(self, client, admin_headers):
        response = client.patch(
            f"/admin/subscriptions/{uuid4()}/status", json={"status": "active"}, headers=admin_headers
        )
        assert response.status_code == 404
