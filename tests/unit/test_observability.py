from typing import Any

import pytest
from structlog.contextvars import get_contextvars
from structlog.testing import capture_logs

from fortstats.core.observability import bind_round_context, clear_round_context, trace_stage


def test_trace_stage_logs_start_and_completion() -> None:
    @trace_stage("tokenize")
    def _tokenize(text: str) -> list[str]:
        return text.split()

    with capture_logs() as cap:
        result = _tokenize("a b c")

    assert result == ["a", "b", "c"]
    events = [e["event"] for e in cap]
    assert events == ["Starting stage: tokenize", "Completed stage: tokenize"]
    assert all("execution_id" in e for e in cap)
    assert cap[1]["duration_ms"] >= 0


@pytest.mark.asyncio
async def test_trace_stage_wraps_coroutines() -> None:
    @trace_stage()
    async def _load() -> str:
        return "ok"

    with capture_logs() as cap:
        result = await _load()

    assert result == "ok"
    assert [e["event"] for e in cap] == ["Starting stage: _load", "Completed stage: _load"]


def test_trace_stage_logs_and_reraises_failures() -> None:
    @trace_stage("explode")
    def _explode() -> None:
        raise KeyError("missing")

    with capture_logs() as cap:
        with pytest.raises(KeyError):
            _explode()

    failure: dict[str, Any] = cap[-1]
    assert failure["event"] == "Stage failed: explode"
    assert failure["log_level"] == "error"
    assert failure["error_type"] == "KeyError"
    assert "KeyError" in failure["traceback"]
    # the execution id is unbound once the stage ends
    assert "execution_id" not in get_contextvars()


def test_round_context_is_bound_and_cleared() -> None:
    bind_round_context("L1026000.log", 2)
    try:
        assert get_contextvars()["log_name"] == "L1026000.log"
        assert get_contextvars()["round_number"] == 2
    finally:
        clear_round_context()

    assert "log_name" not in get_contextvars()
    assert "round_number" not in get_contextvars()
