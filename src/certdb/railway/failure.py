"""
Failure description — structured error information for the failure track.

Every failing operation in certdb produces a FailureDescription: an
ErrorCode naming the kind of failure plus a human-readable message.
Decode failures that abort a database load are wrapped rather than
replaced, so the underlying kind survives in `cause`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, unique
from typing import Optional


@unique
class ErrorCode(Enum):
    """
    Kinds of failure raised by the codec, the loader and the registry.

    All of them are fatal to the operation that produced them. They are
    distinguished so callers can report *why* a certificate database was
    rejected.
    """

    # --- Record decoding ---
    UNKNOWN_ALGORITHM = "UNKNOWN_ALGORITHM"
    """Signature or public key type code is not in the size table."""

    TRUNCATED_BUFFER = "TRUNCATED_BUFFER"
    """Not enough bytes left for a declared field."""

    # --- Database loading ---
    MALFORMED_CONTAINER = "MALFORMED_CONTAINER"
    """The container yielded no usable data block."""

    BAD_MAGIC = "BAD_MAGIC"
    """Header magic is not 'CERT'."""

    CORRUPT_DECLARED_SIZE = "CORRUPT_DECLARED_SIZE"
    """Header size runs past the end of the data block."""

    MALFORMED_RECORD = "MALFORMED_RECORD"
    """A certificate record inside the database failed to decode."""

    MISSING_REQUIRED_CERTIFICATE = "MISSING_REQUIRED_CERTIFICATE"
    """A certificate from the required set is absent."""

    # --- I/O boundaries ---
    SINK_WRITE_FAILURE = "SINK_WRITE_FAILURE"
    """The byte sink refused a write or a seek."""

    SOURCE_READ_FAILURE = "SOURCE_READ_FAILURE"
    """The database file could not be read."""

    # --- Queries / setup ---
    NOT_FOUND_OR_UNLOADED = "NOT_FOUND_OR_UNLOADED"
    """Registry lookup on an unloaded registry or an absent name."""

    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"
    """An operation raised instead of returning a Failure."""


@dataclass(frozen=True, slots=True)
class FailureDescription:
    """
    Immutable failure descriptor carrying error code, message, optional exception,
    optional underlying failure, and timestamp.

    >>> desc = FailureDescription(ErrorCode.BAD_MAGIC, "Not a certificate database")
    >>> desc.code
    <ErrorCode.BAD_MAGIC: 'BAD_MAGIC'>
    >>> desc.message
    'Not a certificate database'
    """

    code: ErrorCode
    message: str
    exception: Optional[BaseException] = field(default=None, repr=False)
    cause: Optional[FailureDescription] = field(default=None, repr=False)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @staticmethod
    def create(
        code: ErrorCode,
        message: str,
        exception: Optional[BaseException] = None,
        cause: Optional[FailureDescription] = None,
    ) -> FailureDescription:
        return FailureDescription(code=code, message=message, exception=exception, cause=cause)

    def root_cause(self) -> FailureDescription:
        """Follow the `cause` chain down to the innermost failure."""
        current = self
        while current.cause is not None:
            current = current.cause
        return current

    def __str__(self) -> str:
        if self.cause is None:
            return f"{self.code.value}: {self.message}"
        return f"{self.code.value}: {self.message} (caused by {self.cause})"
