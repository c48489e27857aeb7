"""
Container adapter — database images that are already unwrapped.

Implements the ContainerExtractor port for a certs.db that has been
extracted from its save container beforehand: the whole file is the one
and only data block.
"""

from __future__ import annotations

from certdb.railway import ErrorCode, Result


class PlainContainerExtractor:
    """Treat the raw bytes as a single data block."""

    def extract(self, raw: bytes) -> Result[list[bytes]]:
        if not raw:
            return Result.failure(
                ErrorCode.MALFORMED_CONTAINER,
                "Not a valid container: file is empty",
            )
        return Result.success([bytes(raw)])
