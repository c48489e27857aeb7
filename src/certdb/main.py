"""
Application entry point — wires adapters into a registry and loads it.

Composition root: the ONLY place where concrete adapters are instantiated.
Everything else depends on the Protocol ports.

Responsibilities:
  1. Configure structlog
  2. Load and validate configuration from environment
  3. Create the file source + container extractor and the registry
  4. Load the configured certificate database and report its contents
"""

from __future__ import annotations

import logging
import sys

import structlog
from pydantic import ValidationError

from certdb import __version__
from certdb.adapters.container import PlainContainerExtractor
from certdb.adapters.file_source import FileByteSource
from certdb.config import AppSettings
from certdb.registry import CertificateRegistry


def configure_structlog(log_level: str = "INFO") -> None:
    """Configure structlog for human-readable console output filtered by level."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def create_registry(settings: AppSettings) -> CertificateRegistry:
    return CertificateRegistry(
        source=FileByteSource(),
        extractor=PlainContainerExtractor(),
        required_names=settings.required_certificates,
    )


def main() -> None:
    """Load the configured certificate database; exit 1 if it is unusable."""
    try:
        settings = AppSettings()
    except ValidationError as e:
        print(f"FATAL: Configuration error — {e}", file=sys.stderr)  # noqa: T201
        sys.exit(1)

    configure_structlog(settings.log_level)
    log = structlog.get_logger()

    log.info(
        "app.starting",
        version=__version__,
        log_level=settings.log_level,
        database_path=str(settings.database_path),
        required=settings.required_certificates,
    )

    if settings.database_path is None:
        log.error("app.no_database", hint="set CERTDB_DATABASE_PATH")
        sys.exit(1)

    registry = create_registry(settings)
    result = registry.load(settings.database_path)
    if not result:
        log.error("app.load_failed", failure=str(result.error()))
        sys.exit(1)

    for name in registry.names():
        cert = registry.get(name).value()
        log.info(
            "app.certificate",
            name=name,
            issuer=cert.body.issuer_string,
            signature_type=hex(cert.signature_type),
            key_type=hex(cert.key_type),
        )


if __name__ == "__main__":
    main()
