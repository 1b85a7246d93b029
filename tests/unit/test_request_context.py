"""Actor/request context vars and the header sanitizers that feed them."""

from app.middleware.actor_context import sanitize_actor_id
from app.middleware.request_id import REQUEST_ID_MAX_LENGTH, sanitize_request_id
from app.shared.context import (
    clear_current_actor,
    get_actor_context,
    get_current_actor_id,
    get_current_request_id,
    set_current_actor,
)
from app.shared.enums import ActorType


def test_no_actor_means_system() -> None:
    ctx = get_actor_context()
    assert ctx.actor_id is None
    assert ctx.actor_type == ActorType.SYSTEM


def test_set_and_clear_actor() -> None:
    set_current_actor("admin", request_id="req-1")
    assert get_current_actor_id() == "admin"
    assert get_current_request_id() == "req-1"
    assert get_actor_context().actor_type == ActorType.USER
    clear_current_actor()
    assert get_current_actor_id() is None
    assert get_current_request_id() is None


def test_empty_actor_id_is_system() -> None:
    set_current_actor("")
    assert get_current_actor_id() is None


def test_sanitize_request_id_keeps_safe_values() -> None:
    assert sanitize_request_id("abc-123_X") == "abc-123_X"


def test_sanitize_request_id_replaces_unsafe_values() -> None:
    for raw in (None, "", "bad id", "x\ny", "a" * (REQUEST_ID_MAX_LENGTH + 1)):
        value = sanitize_request_id(raw)
        assert value != raw
        assert len(value) == 36


def test_sanitize_actor_id() -> None:
    assert sanitize_actor_id(" ckv9x2a0000 ") == "ckv9x2a0000"
    assert sanitize_actor_id("user@example.com") == "user@example.com"
    assert sanitize_actor_id(None) is None
    assert sanitize_actor_id("drop table;") is None
