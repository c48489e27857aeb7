"""
Certificate registry — name-keyed lookup over a loaded certificate database.

Lifecycle: constructed empty, populated by load(), read many times,
replaced wholesale by the next load(). Every load attempt starts by
clearing the registry, so a failed load leaves it empty and unloaded.

The registry does no locking. Embedders that share one instance across
threads must serialize load() and guard reads themselves.

    registry = CertificateRegistry(FileByteSource(), PlainContainerExtractor())
    if registry.load("certs.db"):
        ca = registry.get("CA00000003").value()
"""

from __future__ import annotations

from collections.abc import Iterable
from os import PathLike

import structlog

from certdb.domain.models import CIA_CERT_NAMES, Certificate
from certdb.domain.ports import ByteSource, ContainerExtractor
from certdb.loader import CertificateMap, parse_database
from certdb.railway import ErrorCode, LoggingExecutionContext, Result

log = structlog.get_logger()


class CertificateRegistry:
    """Holds the certificates of the last successfully loaded database."""

    def __init__(
        self,
        source: ByteSource,
        extractor: ContainerExtractor,
        required_names: Iterable[str] = CIA_CERT_NAMES,
    ) -> None:
        self._source = source
        self._extractor = extractor
        self._required_names = tuple(required_names)
        self._certs: CertificateMap = {}
        self._loaded = False

    def load(self, path: str | PathLike[str]) -> Result[int]:
        """
        Load the database at `path`, replacing the current contents.

        The returned Result is truthy exactly when the load succeeded; its
        value is the number of certificates now in the registry.
        """
        self._clear()
        ctx = LoggingExecutionContext(operation="CertificateDatabaseLoad")
        return ctx.execute(
            lambda: self._source.read(path).flat_map(self._load_raw)
        ).peek(lambda count: log.info("registry.loaded", path=str(path), certificates=count))

    def load_bytes(self, raw: bytes) -> Result[int]:
        """Load from a raw (still container-wrapped) database image already in memory."""
        self._clear()
        ctx = LoggingExecutionContext(operation="CertificateDatabaseLoad")
        return ctx.execute(lambda: self._load_raw(raw)).peek(
            lambda count: log.info("registry.loaded", certificates=count)
        )

    def is_loaded(self) -> bool:
        return self._loaded

    def get(self, name: str) -> Result[Certificate]:
        """Look up a certificate; NOT_FOUND_OR_UNLOADED when unloaded or absent."""
        if not self._loaded:
            return Result.failure(
                ErrorCode.NOT_FOUND_OR_UNLOADED,
                f"Certificate {name!r} requested but no certificate database is loaded",
            )
        return Result.from_optional(
            self._certs.get(name),
            f"Certificate {name!r} does not exist",
        )

    def names(self) -> list[str]:
        return sorted(self._certs) if self._loaded else []

    def __contains__(self, name: object) -> bool:
        return self._loaded and name in self._certs

    def __len__(self) -> int:
        return len(self._certs) if self._loaded else 0

    def _clear(self) -> None:
        self._certs = {}
        self._loaded = False

    def _load_raw(self, raw: bytes) -> Result[int]:
        return (
            self._extractor.extract(raw)
            .flat_map(lambda blocks: parse_database(blocks, self._required_names))
            .map(self._install)
        )

    def _install(self, certs: CertificateMap) -> int:
        self._certs = certs
        self._loaded = True
        return len(certs)
