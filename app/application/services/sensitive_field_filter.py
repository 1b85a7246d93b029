"""Sensitive field filter: strips credential-shaped keys from audit snapshots."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

DEFAULT_SENSITIVE_FIELDS: frozenset[str] = frozenset(
    {
        "password",
        "passwordHash",
        "password_hash",
        "hashed_password",
        "refreshToken",
        "refresh_token",
        "accessToken",
        "access_token",
        "apiKey",
        "api_key",
        "secretKey",
        "secret_key",
        "clientSecret",
        "client_secret",
    }
)


class SensitiveFieldFilter:
    """Removes denylisted keys from a snapshot before it is diffed or stored.

    Matching is case-insensitive on the key name. The denylist is fixed at
    construction; pass a different one to widen or narrow what is stripped.
    """

    def __init__(self, denylist: Iterable[str] = DEFAULT_SENSITIVE_FIELDS) -> None:
        self._denylist = frozenset(name.lower() for name in denylist)

    @property
    def denylist(self) -> frozenset[str]:
        return self._denylist

    def is_sensitive(self, key: str) -> bool:
        return key.lower() in self._denylist

    def sanitize(self, record: dict[str, Any]) -> dict[str, Any]:
        """Return a shallow copy of record without denylisted keys."""
        return {k: v for k, v in record.items() if not self.is_sensitive(k)}

    def with_extra_fields(self, extra: Iterable[str]) -> SensitiveFieldFilter:
        """Return a new filter whose denylist also contains extra."""
        return SensitiveFieldFilter(self._denylist | {name.lower() for name in extra})
