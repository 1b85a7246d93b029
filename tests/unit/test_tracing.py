"""traced decorator: async-only, transparent to results and exceptions."""

import pytest

from app.shared.telemetry.tracing import add_span_attributes, traced


def test_traced_rejects_sync_functions() -> None:
    with pytest.raises(TypeError):

        @traced("sync")
        def not_async() -> None:
            return None


async def test_traced_returns_result() -> None:
    @traced("double")
    async def double(*, value: int) -> int:
        add_span_attributes(value=value)
        return value * 2

    assert await double(value=21) == 42
    assert double.__name__ == "double"


async def test_traced_reraises() -> None:
    @traced()
    async def boom() -> None:
        raise ValueError("boom")

    with pytest.raises(ValueError, match="boom"):
        await boom()
