"""
Ports — Protocol-based interfaces for the collaborators around the core.

The codec and loader work on bytes already in memory. Getting those bytes
(file I/O, container extraction) and writing encoded records out are the
job of adapters that satisfy these protocols structurally:

  Domain ← Ports (protocols) ← Adapters (implementations)
"""

from __future__ import annotations

from os import PathLike
from typing import Protocol, runtime_checkable

from certdb.railway import Result


@runtime_checkable
class ByteSource(Protocol):
    """
    Port: read the raw bytes of a certificate database file.

    Returns Result[bytes]; I/O errors become Result.failure(SOURCE_READ_FAILURE, ...).
    """

    def read(self, path: str | PathLike[str]) -> Result[bytes]: ...


@runtime_checkable
class ContainerExtractor(Protocol):
    """
    Port: unwrap the outer container of a database file into data blocks.

    The loader only consumes the first block. A file that is not a valid
    container yields Result.failure(MALFORMED_CONTAINER, ...).
    """

    def extract(self, raw: bytes) -> Result[list[bytes]]: ...


@runtime_checkable
class ByteSink(Protocol):
    """
    Port: seekable destination for encoded certificate records.

    Binary files opened for writing and io.BytesIO satisfy it. `write`
    returns the number of bytes written; a short count is a failure, and
    so is None (a non-blocking raw stream that accepted nothing).
    """

    def write(self, data: bytes, /) -> int | None: ...

    def seek(self, offset: int, whence: int = 0, /) -> int: ...
