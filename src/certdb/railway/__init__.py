"""
Railway-Oriented Programming primitives used across certdb.

    from certdb.railway import Result, ErrorCode

    def check_magic(magic: int) -> Result[int]:
        if magic != CERTS_DB_MAGIC:
            return Result.failure(ErrorCode.BAD_MAGIC, "Not a certificate database")
        return Result.success(magic)
"""

from certdb.railway.assertions import ResultAssertions
from certdb.railway.execution import (
    ExecutionContext,
    LoggingExecutionContext,
    NoOpExecutionContext,
)
from certdb.railway.failure import ErrorCode, FailureDescription
from certdb.railway.result import Failure, Result, Success

__all__ = [
    "Result",
    "Success",
    "Failure",
    "ErrorCode",
    "FailureDescription",
    "ExecutionContext",
    "NoOpExecutionContext",
    "LoggingExecutionContext",
    "ResultAssertions",
]
