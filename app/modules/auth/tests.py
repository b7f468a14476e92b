"""
Tests para autenticación con tokens del proveedor de identidad
"""

import pytest
from datetime import timedelta
from uuid import uuid4

import jwt

from app.core.config import settings
from app.modules.auth.utils import create_access_token, decode_access_token


class TestTokens:

    def test_round_trip_payload(self):
        user_id = uuid4()
        payload = decode_access_token(create_access_token(str(user_id), email="budi@example.com", full_name="Budi"))
        assert payload["sub"] == str(user_id)
        assert payload["email"] == "budi@example.com"
        assert payload["user_metadata"] == {"full_name": "Budi"}
        assert payload["aud"] == settings.JWT_AUDIENCE

    def test_expired_token(self):
        token = create_access_token(str(uuid4()), expires_delta=timedelta(minutes=-5))
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_access_token(token)

    def test_wrong_secret(self):
        token = jwt.encode(
            {"sub": str(uuid4()), "aud": settings.JWT_AUDIENCE},
            "another-secret-that-is-also-long-enough",
            algorithm=settings.ALGORITHM
        )
        with pytest.raises(jwt.InvalidSignatureError):
            decode_access_token(token)


class TestAuthAPI:
    """Tests de endpoints API"""

    def test_me(self, client, auth_headers, customer_id):
        response = client.get("/auth/me", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == str(customer_id)
        assert data["full_name"] == "Budi Santoso"
        assert data["role"] is None
        assert data["is_admin"] is False

    def test_me_admin(self, client, admin_headers):
        data = client.get("/auth/me", headers=admin_headers).json()
        assert data["role"] == "admin"
        assert data["is_admin"] is True

    def test_invalid_token(self, client):
        response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_token_without_uuid_subject(self, client):
        token = jwt.encode(
            {"sub": "not-a-uuid", "aud": settings.JWT_AUDIENCE},
            settings.jwt_secret,
            algorithm=settings.ALGORITHM
        )
        response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_missing_token(self, client):
        assert client.get("/auth/me").status_code in (401, 403)

    def test_non_admin_role_is_not_admin(self, client, db_session, customer_id, auth_headers):
        from app.modules.auth.models import UserRole

        db_session.add(UserRole(user_id=customer_id, role="customer"))
        db_session.commit()

        data = client.get("/auth/me", headers=auth_headers).json()
        assert data["role"] == "customer"
        assert data["is_admin"] is False
