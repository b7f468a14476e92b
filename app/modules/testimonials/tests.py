"""
Tests para el módulo de Testimonios
"""

import pytest
from datetime import datetime, timezone
from uuid import uuid4

from pydantic import ValidationError
from sqlalchemy.exc import OperationalError

from app.common.exceptions import PersistenceUnavailable
from app.common.results import ResultStatus
from app.modules.testimonials import crud, schemas


def _store_down(*args, **kwargs):
    raise OperationalError("INSERT", {}, Exception("connection refused"))


def _submit(db_session, name="Siti", message="Great food!", rating=5, approved=False, created_at=None):
    testimonial = crud.create_testimonial(
        db_session,
        schemas.TestimonialCreate(customer_name=name, review_message=message, rating=rating)
    )
    if approved:
        testimonial = crud.approve_testimonial(db_session, testimonial.id)
    if created_at:
        testimonial.created_at = created_at
        db_session.commit()
    return testimonial


class TestTestimonialSchema:

    @pytest.mark.parametrize("rating", [0, 6, -1])
    def test_rating_out_of_range(self, rating):
        with pytest.raises(ValidationError):
            schemas.TestimonialCreate(customer_name="Siti", review_message="Nice", rating=rating)

    def test_blank_fields_rejected(self):
        with pytest.raises(ValidationError):
            schemas.TestimonialCreate(customer_name="   ", review_message="Nice", rating=4)
        with pytest.raises(ValidationError):
            schemas.TestimonialCreate(customer_name="Siti", review_message="", rating=4)

    def test_text_is_trimmed(self):
        data = schemas.TestimonialCreate(customer_name=" Siti ", review_message=" Tasty ", rating=4)
        assert data.customer_name == "Siti"
        assert data.review_message == "Tasty"


class TestTestimonialCrud:
    """Tests para crud de testimonios"""

    def test_new_testimonial_is_pending(self, db_session):
        testimonial = _submit(db_session)
        assert testimonial.id is not None
        assert testimonial.is_approved is False

    def test_only_approved_are_listed_newest_first(self, db_session):
        _submit(db_session, name="Pending")
        older = _submit(
            db_session, name="Older", approved=True,
            created_at=datetime(2026, 1, 5, 10, 0, tzinfo=timezone.utc)
        )
        newer = _submit(
            db_session, name="Newer", approved=True,
            created_at=datetime(2026, 2, 5, 10, 0, tzinfo=timezone.utc)
        )

        result = crud.list_approved_testimonials(db_session)

        assert result.status == ResultStatus.OK
        assert [t.id for t in result.data] == [newer.id, older.id]

    def test_list_respects_limit(self, db_session):
        for index in range(3):
            _submit(db_session, name=f"Customer {index}", approved=True)
        assert len(crud.list_approved_testimonials(db_session, limit=2).data) == 2

    def test_list_empty(self, db_session):
        _submit(db_session)
        result = crud.list_approved_testimonials(db_session)
        assert result.status == ResultStatus.EMPTY
        assert result.data == []

    def test_list_store_failure(self, db_session, monkeypatch):
        monkeypatch.setattr(db_session, "execute", _store_down)
        assert crud.list_approved_testimonials(db_session).status == ResultStatus.UNAVAILABLE

    def test_create_store_failure(self, db_session, monkeypatch):
        monkeypatch.setattr(db_session, "commit", _store_down)
        with pytest.raises(PersistenceUnavailable):
            _submit(db_session)


class TestTestimonialAPI:
    """Tests de endpoints API"""

    def test_submit_is_public(self, client):
        response = client.post("/testimonials/", json={
            "customer_name": "Siti",
            "review_message": "The protein plan keeps me going.",
            "rating": 5
        })
        assert response.status_code == 201
        data = response.json()
        assert data["is_approved"] is False
        assert data["rating"] == 5

    @pytest.mark.parametrize("payload", [
        {"customer_name": "Siti", "review_message": "Ok", "rating": 0},
        {"customer_name": "   ", "review_message": "Ok", "rating": 3},
        {"customer_name": "Siti", "rating": 3},
    ])
    def test_submit_invalid(self, client, payload):
        assert client.post("/testimonials/", json=payload).status_code == 422

    def test_submit_unavailable(self, client, db_session, monkeypatch):
        monkeypatch.setattr(db_session, "commit", _store_down)
        response = client.post("/testimonials/", json={
            "customer_name": "Siti", "review_message": "Great", "rating": 4
        })
        assert response.status_code == 503

    def test_pending_not_listed_until_approved(self, client, admin_headers):
        created = client.post("/testimonials/", json={
            "customer_name": "Siti", "review_message": "Great", "rating": 4
        }).json()

        assert client.get("/testimonials/").json()["total"] == 0

        approved = client.post(f"/admin/testimonials/{created['id']}/approve", headers=admin_headers)
        assert approved.status_code == 200
        assert approved.json()["is_approved"] is True

        listing = client.get("/testimonials/").json()
        assert listing["total"] == 1
        assert listing["testimonials"][0]["customer_name"] == "Siti"

    def test_approve_requires_admin(self, client, auth_headers):
        created = client.post("/testimonials/", json={
            "customer_name": "Siti", "review_message": "Great", "rating": 4
        }).json()
        response = client.post(f"/admin/testimonials/{created['id']}/approve", headers=auth_headers)
        assert response.status_code == 403

    def test_approve_unknown(self, client, admin_headers):
        response = client.post(f"/admin/testimonials/{uuid4()}/approve", headers=admin_headers)
        assert response.status_code == 404

    def test_limit_bounds(self, client):
        assert client.get("/testimonials/?limit=0").status_code == 422
        assert client.get("/testimonials/?limit=51").status_code == 422
