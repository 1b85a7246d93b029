"""Tests for domain and persistence exceptions (error_code, message, details)."""

from app.domain.exceptions import (
    AuditServiceException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    UserModificationException,
    ValidationException,
)
from app.infrastructure.exceptions import PersistenceException


def test_audit_service_exception_default_error_code() -> None:
    """Base AuditServiceException uses class name as error_code when not provided."""
    exc = AuditServiceException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "AuditServiceException"
    assert exc.details == {}
    assert exc.to_dict() == {"error": "AuditServiceException", "message": "Something failed"}


def test_audit_service_exception_custom_error_code_and_details() -> None:
    exc = AuditServiceException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {"error": "CUSTOM", "message": "Oops", "details": {"key": "value"}}


def test_validation_exception() -> None:
    """ValidationException sets VALIDATION_ERROR and optional field in details."""
    exc = ValidationException("Invalid format", field="status")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "status"}
    assert ValidationException("Invalid").details == {}


def test_resource_not_found_exception() -> None:
    exc = ResourceNotFoundException("profile", "u1")
    assert exc.error_code == "RESOURCE_NOT_FOUND"
    assert exc.message == "profile not found: u1"
    assert exc.details == {"resource_type": "profile", "resource_id": "u1"}


def test_user_modification_exception_uses_reason_as_message() -> None:
    exc = UserModificationException("u1", "Status unchanged")
    assert exc.message == "Status unchanged"
    assert exc.error_code == "USER_NOT_MODIFIABLE"
    assert exc.details == {"user_id": "u1"}


def test_sql_not_configured_exception() -> None:
    exc = SqlNotConfiguredException()
    assert exc.error_code == "SERVICE_UNAVAILABLE"


def test_persistence_exception_is_an_audit_service_exception() -> None:
    exc = PersistenceException("user_audit.create", "connection refused")
    assert isinstance(exc, AuditServiceException)
    assert exc.error_code == "PERSISTENCE_ERROR"
    assert exc.details == {"operation": "user_audit.create", "reason": "connection refused"}
