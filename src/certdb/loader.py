"""
Certificate database loader — header validation and record iteration.

Pure business logic: takes the data blocks a ContainerExtractor produced
and returns the name-keyed certificate mapping, or the first reason the
database must be rejected.

  blocks[0]
    → header present?            MALFORMED_CONTAINER
    → magic == 'CERT'?           BAD_MAGIC
    → size + 8 <= len(block)?    CORRUPT_DECLARED_SIZE
    → decode records until size  MALFORMED_RECORD (whole load aborts)
    → required names present?    MISSING_REQUIRED_CERTIFICATE

There is no partial-success mode: one bad record rejects the database.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from functools import partial
from typing import TypeAlias

import structlog

from certdb.codec import decode_certificate, encode_certificate
from certdb.domain.models import CERTS_DB_MAGIC, Certificate, DatabaseHeader
from certdb.railway import ErrorCode, FailureDescription, Result

log = structlog.get_logger()

CertificateMap: TypeAlias = dict[str, Certificate]


def parse_header(block: bytes) -> Result[DatabaseHeader]:
    """Parse and check the database header at the start of `block`."""
    if len(block) < DatabaseHeader.SIZE:
        return Result.failure(
            ErrorCode.MALFORMED_CONTAINER,
            f"Data block is {len(block)} bytes, too short for a "
            f"{DatabaseHeader.SIZE}-byte database header",
        )
    return Result.success(DatabaseHeader.parse(block)).ensure(
        lambda header: header.magic == CERTS_DB_MAGIC,
        ErrorCode.BAD_MAGIC,
        "Data block is not a certificate database (magic is not 'CERT')",
    )


def parse_database(
    blocks: Sequence[bytes],
    required_names: Iterable[str],
) -> Result[CertificateMap]:
    """
    Build the certificate mapping from container data blocks.

    Only the first block is used. Returns the fresh mapping on success;
    installing it somewhere is up to the caller.
    """
    if not blocks:
        return Result.failure(ErrorCode.MALFORMED_CONTAINER, "Container has no data blocks")

    block = blocks[0]
    required = list(required_names)
    return (
        parse_header(block)
        .peek_failure(lambda err: log.error("loader.bad_header", failure=str(err)))
        .flat_map(lambda header: _check_declared_size(block, header))
        .flat_map(lambda header: _decode_records(block, header))
        .flat_map(lambda certs: _check_required(certs, required))
    )


def _check_declared_size(block: bytes, header: DatabaseHeader) -> Result[DatabaseHeader]:
    if len(block) < header.total_size:
        log.error(
            "loader.corrupt_size",
            declared=header.size,
            total_size=header.total_size,
            available=len(block),
        )
        return Result.failure(
            ErrorCode.CORRUPT_DECLARED_SIZE,
            f"Header reports {header.size:#x} payload bytes but only "
            f"{len(block) - DatabaseHeader.SIZE:#x} are present, may be corrupted",
        )
    return Result.success(header)


def _decode_records(block: bytes, header: DatabaseHeader) -> Result[CertificateMap]:
    total_size = header.total_size
    certs: CertificateMap = {}
    pos = DatabaseHeader.SIZE
    while pos < total_size:
        decoded = decode_certificate(block, pos, end=total_size).map_failure(
            partial(_malformed_record, pos)
        )
        if decoded.is_failure():
            return Result.failure_from(decoded.error())

        record = decoded.value()
        name = record.certificate.name
        if name in certs:
            log.warning("loader.duplicate_certificate", name=name, offset=hex(pos))
        certs[name] = record.certificate
        pos += record.size

    log.debug("loader.records_decoded", count=len(certs), payload_size=header.size)
    return Result.success(certs)


def _malformed_record(pos: int, cause: FailureDescription) -> FailureDescription:
    log.error("loader.malformed_record", offset=hex(pos), failure=str(cause))
    return FailureDescription.create(
        ErrorCode.MALFORMED_RECORD,
        f"Certificate record at {pos:#x} failed to decode ({cause.code.value})",
        cause=cause,
    )


def _check_required(certs: CertificateMap, required: list[str]) -> Result[CertificateMap]:
    missing = [name for name in required if name not in certs]
    if missing:
        for name in missing:
            log.error("loader.missing_required_certificate", name=name)
        return Result.failure_from(
            FailureDescription.create(
                ErrorCode.MISSING_REQUIRED_CERTIFICATE,
                "Required certificates do not exist: " + ", ".join(missing),
            )
        )
    return Result.success(certs)


def build_database(certificates: Iterable[Certificate]) -> bytes:
    """Serialize certificates into a database image that parse_database accepts."""
    payload = b"".join(encode_certificate(cert) for cert in certificates)
    header = DatabaseHeader(magic=CERTS_DB_MAGIC, size=len(payload))
    return header.export() + payload
