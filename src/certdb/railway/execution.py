"""
Execution contexts — separate WHAT (pure logic) from HOW (side effects).

The codec and loader only describe what happens and return Result[T].
An ExecutionContext wraps such a computation with cross-cutting behavior;
certdb uses it to time and log registry loads:

    ctx = LoggingExecutionContext(operation="CertificateDatabaseLoad")
    result = ctx.execute(lambda: pipeline(path))
"""

from __future__ import annotations

import time
from typing import Callable, Protocol, TypeVar, runtime_checkable

import structlog

from certdb.railway.failure import ErrorCode, FailureDescription
from certdb.railway.result import Failure, Result

T = TypeVar("T")
log = structlog.get_logger()


@runtime_checkable
class ExecutionContext(Protocol):
    """Anything with execute(computation) -> Result[T] is an execution context."""

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]: ...


class NoOpExecutionContext:
    """Passthrough execution context — runs computation without any wrapper."""

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]:
        return computation()


class LoggingExecutionContext:
    """
    Execution context that logs entry, exit, duration, and result state.

    Wraps another context (decorator pattern) to add observability.
    A computation that raises becomes an UNEXPECTED_ERROR Failure
    carrying the exception.
    """

    def __init__(
        self,
        inner: ExecutionContext | None = None,
        operation: str = "unknown",
    ) -> None:
        self._inner = inner or NoOpExecutionContext()
        self._operation = operation

    def execute(self, computation: Callable[[], Result[T]]) -> Result[T]:
        log.debug("execution.started", operation=self._operation)
        start = time.monotonic()

        try:
            result = self._inner.execute(computation)
        except Exception as e:
            log.error(
                "execution.crashed",
                operation=self._operation,
                elapsed_seconds=round(time.monotonic() - start, 3),
                error=str(e),
            )
            return Failure(
                FailureDescription(
                    ErrorCode.UNEXPECTED_ERROR,
                    f"{self._operation} crashed: {e}",
                    e,
                )
            )

        elapsed = round(time.monotonic() - start, 3)
        if result.is_success():
            log.info("execution.completed", operation=self._operation, elapsed_seconds=elapsed)
        else:
            log.warning(
                "execution.failed",
                operation=self._operation,
                elapsed_seconds=elapsed,
                failure=str(result.error()),
            )
        return result
