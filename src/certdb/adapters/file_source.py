"""
File adapter — reads certificate database files from the local filesystem.

Implements the ByteSource port. OS errors (missing file, permissions,
directories) are captured into Result failures at this boundary.
"""

from __future__ import annotations

from os import PathLike
from pathlib import Path

import structlog

from certdb.railway import ErrorCode, Result

log = structlog.get_logger()


class FileByteSource:
    """Read a whole file into memory."""

    def read(self, path: str | PathLike[str]) -> Result[bytes]:
        file_path = Path(path)
        return (
            Result.from_computation(
                file_path.read_bytes,
                ErrorCode.SOURCE_READ_FAILURE,
                f"Failed to read certificate database {file_path}",
            )
            .peek(lambda data: log.debug("file_source.read", path=str(file_path), size=len(data)))
            .peek_failure(
                lambda err: log.error(
                    "file_source.read_failed", path=str(file_path), failure=str(err)
                )
            )
        )
