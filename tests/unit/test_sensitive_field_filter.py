"""SensitiveFieldFilter: denylisted keys are removed, everything else untouched."""

import pytest

from app.application.services.sensitive_field_filter import (
    DEFAULT_SENSITIVE_FIELDS,
    SensitiveFieldFilter,
)


@pytest.mark.parametrize(
    "key", ["password", "passwordHash", "refreshToken", "accessToken", "apiKey", "secretKey"]
)
@pytest.mark.parametrize("value", ["secret", None, "", {"nested": 1}, 0])
def test_sanitize_never_leaks_denylisted_keys(key: str, value: object) -> None:
    """Denylisted keys are removed whatever their value."""
    record = {"name": "A", key: value}
    result = SensitiveFieldFilter().sanitize(record)
    assert key not in result
    assert result == {"name": "A"}


def test_sanitize_preserves_other_keys() -> None:
    record = {"name": "A", "email": "a@x.com", "meta": {"password": "kept-nested"}, "n": None}
    result = SensitiveFieldFilter().sanitize(record)
    assert result == record


def test_sanitize_returns_copy_and_does_not_mutate_input() -> None:
    record = {"name": "A", "password": "x"}
    result = SensitiveFieldFilter().sanitize(record)
    assert result is not record
    assert record == {"name": "A", "password": "x"}


def test_matching_is_case_insensitive() -> None:
    result = SensitiveFieldFilter().sanitize({"PASSWORD": "x", "Api_Key": "y", "ok": 1})
    assert result == {"ok": 1}


def test_custom_denylist_replaces_default() -> None:
    f = SensitiveFieldFilter(["ssn"])
    assert f.sanitize({"ssn": "1", "password": "p"}) == {"password": "p"}


def test_with_extra_fields_extends_denylist() -> None:
    base = SensitiveFieldFilter()
    extended = base.with_extra_fields(["ssn"])
    assert extended.is_sensitive("ssn")
    assert extended.is_sensitive("password")
    assert not base.is_sensitive("ssn")


def test_default_denylist_covers_snake_and_camel_case() -> None:
    assert {"password_hash", "passwordHash", "refresh_token", "refreshToken"} <= DEFAULT_SENSITIVE_FIELDS
