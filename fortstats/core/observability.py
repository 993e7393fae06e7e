"""Observability for the parsing pipeline.

Structured logging is configured once here. ``trace_stage`` wraps a pipeline
stage (sync or async) and logs entry, duration and failures under a unique
execution id; ``bind_round_context`` tags every log line of a round with the
log it came from.
"""

import asyncio
import functools
import logging
import sys
import time
import traceback
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, TypeVar, cast

import structlog
from pydantic import BaseModel, ConfigDict, Field
from structlog.contextvars import bind_contextvars, unbind_contextvars

# Configure structured logging
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer() if sys.stderr.isatty() else structlog.processors.JSONRenderer(),  # type: ignore[list-item]
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=False,
)

logger = structlog.get_logger()

F = TypeVar("F", bound=Callable[..., Any])

ROUND_CONTEXT_KEYS = ("log_name", "round_number")


class StageTrace(BaseModel):
    """Execution record for one traced pipeline stage."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    stage: str = Field(description="Stage name")
    function_name: str = Field(description="Fully qualified function name")
    execution_id: str = Field(description="Unique execution ID")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    duration_ms: float | None = Field(default=None, description="Execution duration in milliseconds")

    is_success: bool = Field(default=True, description="Whether execution succeeded")
    error_type: str | None = Field(default=None, description="Exception class name if failed")
    error_message: str | None = Field(default=None, description="Exception message if failed")
    error_traceback: str | None = Field(default=None, description="Full traceback if failed")

    is_async: bool = Field(default=False, description="Whether function is async")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Additional metadata")


def configure_logging(level: str = "INFO") -> None:
    """Set the stdlib root level; structlog output goes through stdlib handlers."""
    logging.basicConfig(format="%(message)s", stream=sys.stderr)
    logging.getLogger().setLevel(level.upper())


def bind_round_context(log_name: str, round_number: int) -> None:
    bind_contextvars(log_name=log_name, round_number=round_number)


def clear_round_context() -> None:
    unbind_contextvars(*ROUND_CONTEXT_KEYS)


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def trace_stage(
    stage: str | None = None,
    *,
    log_level: str = "INFO",
    add_metadata: dict[str, Any] | None = None,
) -> Callable[[F], F]:
    """Decorator tracing a pipeline stage.

    Logs entry and success with the measured duration. On failure it logs the
    error type, message and traceback, then re-raises unchanged. Works for both
    plain and ``async`` functions.

    Example:
        >>> @trace_stage("parse_round")
        ... def parse_round(text: str) -> list: ...
    """

    def decorator(func: F) -> F:
        is_async = asyncio.iscoroutinefunction(func)
        stage_name = stage or func.__name__
        level = _level(log_level)

        def _start() -> StageTrace:
            function_name = f"{func.__module__}.{func.__name__}"
            trace = StageTrace(
                stage=stage_name,
                function_name=function_name,
                execution_id=f"{function_name}_{int(time.time() * 1000000)}",
                is_async=is_async,
                metadata=add_metadata or {},
            )
            bind_contextvars(execution_id=trace.execution_id)
            logger.log(level, f"Starting stage: {stage_name}", execution_id=trace.execution_id)
            return trace

        def _succeeded(trace: StageTrace, start_time: float) -> None:
            trace.duration_ms = (time.perf_counter() - start_time) * 1000
            logger.log(
                level,
                f"Completed stage: {stage_name}",
                execution_id=trace.execution_id,
                duration_ms=trace.duration_ms,
            )

        def _failed(trace: StageTrace, start_time: float, e: Exception) -> None:
            trace.duration_ms = (time.perf_counter() - start_time) * 1000
            trace.is_success = False
            trace.error_type = type(e).__name__
            trace.error_message = str(e)
            trace.error_traceback = traceback.format_exc()
            logger.error(
                f"Stage failed: {stage_name}",
                execution_id=trace.execution_id,
                duration_ms=trace.duration_ms,
                error_type=trace.error_type,
                error_message=trace.error_message,
                traceback=trace.error_traceback,
                metadata=trace.metadata,
            )

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            trace = _start()
            start_time = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
                _succeeded(trace, start_time)
                return result
            except Exception as e:
                _failed(trace, start_time, e)
                raise
            finally:
                unbind_contextvars("execution_id")

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            trace = _start()
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
                _succeeded(trace, start_time)
                return result
            except Exception as e:
                _failed(trace, start_time, e)
                raise
            finally:
                unbind_contextvars("execution_id")

        if is_async:
            return cast(F, async_wrapper)
        return cast(F, sync_wrapper)

    return decorator
