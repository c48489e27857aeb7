"""
Certificate codec — one certificate record to and from its on-disk layout.

Decoding reads each fixed-width field at a known offset and checks bounds
before every read, so a truncated or garbled buffer yields a Failure
instead of an exception:

  buffer[offset:]
    → signature type (u32) → signature_size()       UNKNOWN_ALGORITHM
    → body at align_up(4 + signature, 0x40)         TRUNCATED_BUFFER
    → key type → public_key_size()                  UNKNOWN_ALGORITHM
    → public key after the body                     TRUNCATED_BUFFER
    → DecodedRecord(certificate, bytes consumed)

Encoding writes the same layout back, zero-filling the alignment gap, and
satisfies decode(encode(c)) == (c, len(encode(c))).
"""

from __future__ import annotations

import os
import struct

import structlog

from certdb.domain.models import Certificate, CertificateBody, DecodedRecord
from certdb.domain.ports import ByteSink
from certdb.domain.sizes import BODY_ALIGNMENT, align_up, public_key_size, signature_size
from certdb.railway import ErrorCode, Result

log = structlog.get_logger()

_TYPE_CODE = struct.Struct("<I")


# ─────────────────────── Decoding ───────────────────────


def decode_certificate(
    buffer: bytes,
    offset: int = 0,
    end: int | None = None,
) -> Result[DecodedRecord]:
    """
    Decode the certificate record starting at `offset`.

    `end` bounds the readable region (defaults to the end of `buffer`);
    a record reaching past it is reported as TRUNCATED_BUFFER.
    """
    limit = len(buffer) if end is None else min(end, len(buffer))
    available = limit - offset
    if offset < 0 or available < _TYPE_CODE.size:
        return Result.failure(
            ErrorCode.TRUNCATED_BUFFER,
            f"Record at {offset:#x} has {max(available, 0)} bytes, "
            f"need {_TYPE_CODE.size} for the signature type",
        )

    (signature_type,) = _TYPE_CODE.unpack_from(buffer, offset)
    return signature_size(signature_type).flat_map(
        lambda signature_length: _decode_after_signature(
            buffer, offset, available, signature_type, signature_length
        )
    )


def _decode_after_signature(
    buffer: bytes,
    offset: int,
    available: int,
    signature_type: int,
    signature_length: int,
) -> Result[DecodedRecord]:
    # Bodies start on a 0x40 boundary measured from the record start
    body_start = align_up(_TYPE_CODE.size + signature_length, BODY_ALIGNMENT)
    body_end = body_start + CertificateBody.SIZE
    if available < body_end:
        return Result.failure(
            ErrorCode.TRUNCATED_BUFFER,
            f"Record at {offset:#x} needs {body_end:#x} bytes up to the end of its body, "
            f"{available:#x} available",
        )

    signature_start = offset + _TYPE_CODE.size
    signature = bytes(buffer[signature_start : signature_start + signature_length])
    body = CertificateBody.parse(buffer, offset + body_start)

    return public_key_size(body.key_type).flat_map(
        lambda key_length: _decode_public_key(
            buffer, offset, available, body_end, key_length, signature_type, signature, body
        )
    )


def _decode_public_key(
    buffer: bytes,
    offset: int,
    available: int,
    body_end: int,
    key_length: int,
    signature_type: int,
    signature: bytes,
    body: CertificateBody,
) -> Result[DecodedRecord]:
    record_end = body_end + key_length
    if available < record_end:
        return Result.failure(
            ErrorCode.TRUNCATED_BUFFER,
            f"Record at {offset:#x} needs {key_length:#x} public key bytes after its body, "
            f"{available - body_end:#x} available",
        )

    public_key = bytes(buffer[offset + body_end : offset + record_end])
    certificate = Certificate(
        signature_type=signature_type,
        signature=signature,
        body=body,
        public_key=public_key,
    )
    return Result.success(DecodedRecord(certificate=certificate, size=record_end))


# ─────────────────────── Encoding ───────────────────────


def _padding_length(certificate: Certificate) -> int:
    return certificate.body_offset - _TYPE_CODE.size - len(certificate.signature)


def encode_certificate(certificate: Certificate) -> bytes:
    """Serialize a certificate to its on-disk record layout."""
    return b"".join(
        (
            _TYPE_CODE.pack(certificate.signature_type),
            certificate.signature,
            bytes(_padding_length(certificate)),
            certificate.body.export(),
            certificate.public_key,
        )
    )


def write_certificate(certificate: Certificate, sink: ByteSink) -> Result[int]:
    """
    Write a certificate record to a seekable sink.

    The alignment gap after the signature is skipped with a relative seek,
    so its content is whatever the sink holds there (zeros for fresh files
    and buffers). Returns the number of bytes the record spans.
    """
    return (
        _write(
            sink,
            _TYPE_CODE.pack(certificate.signature_type) + certificate.signature,
            "signature",
        )
        .flat_map(lambda _: _skip(sink, _padding_length(certificate)))
        .flat_map(lambda _: _write(sink, certificate.body.export(), "body"))
        .flat_map(lambda _: _write(sink, certificate.public_key, "public key"))
        .map(lambda _: certificate.record_size)
        .peek_failure(
            lambda err: log.error(
                "codec.write_failed", certificate=certificate.name, failure=str(err)
            )
        )
    )


def _write(sink: ByteSink, data: bytes, stage: str) -> Result[int]:
    def attempt() -> int:
        written = sink.write(data)
        return 0 if written is None else written

    return Result.from_computation(
        attempt,
        ErrorCode.SINK_WRITE_FAILURE,
        f"Failed to write {stage}",
    ).flat_map(
        lambda written: Result.success(written)
        if written == len(data)
        else Result.failure(
            ErrorCode.SINK_WRITE_FAILURE,
            f"Short write of {stage}: {written} of {len(data)} bytes",
        )
    )


def _skip(sink: ByteSink, count: int) -> Result[int]:
    def attempt() -> int:
        sink.seek(count, os.SEEK_CUR)
        return count

    return Result.from_computation(
        attempt,
        ErrorCode.SINK_WRITE_FAILURE,
        "Failed to seek to body",
    )
