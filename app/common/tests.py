"""
Tests para utilidades comunes
"""

import pytest

from app.common.results import QueryResult, ResultStatus
from app.common.validators import clean_phone, validate_indonesia_phone, normalize_text, require_text


class TestPhoneValidator:

    @pytest.mark.parametrize("phone", ["081234567890", "0812345678", "0812345678901"])
    def test_valid(self, phone):
        assert validate_indonesia_phone(phone)

    @pytest.mark.parametrize("phone", ["1234567890", "08123", "08123456789012", "+6281234567890", "", None])
    def test_invalid(self, phone):
        assert not validate_indonesia_phone(phone)

    def test_clean_phone(self):
        assert clean_phone("0812-3456 (7890)") == "081234567890"


class TestTextHelpers:

    def test_normalize_text(self):
        assert normalize_text("  Peanuts ") == "Peanuts"
        assert normalize_text("   ") is None
        assert normalize_text(None) is None

    def test_require_text(self):
        assert require_text(" Budi ", "Name") == "Budi"
        with pytest.raises(ValueError, match="Name is required"):
            require_text("  ", "Name")


class TestQueryResult:

    def test_from_rows(self):
        assert QueryResult.from_rows([1, 2]).status == ResultStatus.OK
        empty = QueryResult.from_rows([])
        assert empty.status == ResultStatus.EMPTY
        assert empty.data == []
        assert empty.is_available

    def test_unavailable_has_no_data(self):
        result = QueryResult.unavailable()
        assert result.data is None
        assert not result.is_available


class TestAppSurface:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_security_and_request_id_headers(self, client):
        response = client.get("/", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
