"""Tests for domain exceptions (error_code, message, details, to_dict) and their HTTP status mapping."""

from pkgsearch.core.exception_handlers import status_for
from pkgsearch.domain.exceptions import (
    AuthenticationException,
    PackageSearchException,
    SearchUnavailableException,
    SqlNotConfiguredException,
    ValidationException,
    ViewRefreshException,
)


def test_base_exception_default_error_code() -> None:
    """Base PackageSearchException uses class name as error_code when not provided."""
    exc = PackageSearchException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "PackageSearchException"
    assert exc.details == {}


def test_to_dict() -> None:
    exc = PackageSearchException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {"error": "CUSTOM", "message": "Oops", "details": {"key": "value"}}


def test_validation_exception() -> None:
    exc = ValidationException("page_size must be >= 1", field="page_size")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "page_size"}
    assert status_for(exc) == 400


def test_validation_exception_without_field() -> None:
    assert ValidationException("bad").details == {}


def test_authentication_failed() -> None:
    exc = AuthenticationException("Invalid refresh token")
    assert exc.error_code == "AUTHENTICATION_ERROR"
    assert exc.message == "Invalid refresh token"
    assert status_for(exc) == 401
    assert AuthenticationException().message == "Authentication failed"


def test_sql_not_configured() -> None:
    exc = SqlNotConfiguredException("DATABASE_URL is not set")
    assert exc.error_code == "SERVICE_UNAVAILABLE"
    assert exc.details == {"reason": "DATABASE_URL is not set"}
    assert status_for(exc) == 503
    assert SqlNotConfiguredException().details == {}


def test_search_unavailable() -> None:
    exc = SearchUnavailableException("OperationalError")
    assert exc.error_code == "SEARCH_UNAVAILABLE"
    assert exc.details == {"reason": "OperationalError"}
    assert status_for(exc) == 503


def test_view_refresh_failed() -> None:
    exc = ViewRefreshException("search", "ProgrammingError")
    assert exc.error_code == "VIEW_REFRESH_FAILED"
    assert "search" in exc.message
    assert exc.details == {"view_name": "search", "reason": "ProgrammingError"}
    assert status_for(exc) == 503


def test_unknown_error_code_maps_to_400() -> None:
    assert status_for(PackageSearchException("x", error_code="SOMETHING")) == 400
