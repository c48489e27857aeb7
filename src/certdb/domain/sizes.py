"""
Size tables — serialized lengths of signatures and public keys by type code.

A certificate record has two variable-length fields. Their lengths are
not stored in the record; they are implied by the signature type code at
the start of the record and by the key type code inside the body.

Unknown codes are reported as a Failure(UNKNOWN_ALGORITHM), never as a
zero length, so a legitimately empty field could never be mistaken for
an unrecognized algorithm.
"""

from __future__ import annotations

from enum import IntEnum, unique

import structlog

from certdb.railway import ErrorCode, Result

log = structlog.get_logger()

#: Certificate bodies start on this boundary, measured from the record start.
BODY_ALIGNMENT = 0x40


@unique
class SignatureType(IntEnum):
    RSA_4096_SHA1 = 0x010000
    RSA_2048_SHA1 = 0x010001
    ECDSA_SHA1 = 0x010002
    RSA_4096_SHA256 = 0x010003
    RSA_2048_SHA256 = 0x010004
    ECDSA_SHA256 = 0x010005
    HMAC_SHA1 = 0x010006


@unique
class PublicKeyType(IntEnum):
    RSA_4096 = 0
    RSA_2048 = 1
    ECC = 2


# Raw signature lengths; the padding that follows a signature on disk comes
# from aligning the body start to BODY_ALIGNMENT.
_SIGNATURE_SIZES: dict[int, int] = {
    SignatureType.RSA_4096_SHA1: 0x200,
    SignatureType.RSA_2048_SHA1: 0x100,
    SignatureType.ECDSA_SHA1: 0x3C,
    SignatureType.RSA_4096_SHA256: 0x200,
    SignatureType.RSA_2048_SHA256: 0x100,
    SignatureType.ECDSA_SHA256: 0x3C,
    SignatureType.HMAC_SHA1: 0x14,
}

# Sizes include padding (0x34 for RSA, 0x3C for ECC)
_PUBLIC_KEY_SIZES: dict[int, int] = {
    PublicKeyType.RSA_4096: 0x238,
    PublicKeyType.RSA_2048: 0x138,
    PublicKeyType.ECC: 0x78,
}


def signature_size(signature_type: int) -> Result[int]:
    """Length in bytes of the signature selected by `signature_type`."""
    size = _SIGNATURE_SIZES.get(signature_type)
    if size is None:
        log.debug("sizes.unknown_signature_type", signature_type=hex(signature_type))
        return Result.failure(
            ErrorCode.UNKNOWN_ALGORITHM,
            f"Unknown signature type {signature_type:#x}",
        )
    return Result.success(size)


def public_key_size(key_type: int) -> Result[int]:
    """Length in bytes (padding included) of the public key selected by `key_type`."""
    size = _PUBLIC_KEY_SIZES.get(key_type)
    if size is None:
        log.debug("sizes.unknown_public_key_type", key_type=hex(key_type))
        return Result.failure(
            ErrorCode.UNKNOWN_ALGORITHM,
            f"Unknown public key type {key_type:#x}",
        )
    return Result.success(size)


def align_up(value: int, alignment: int = BODY_ALIGNMENT) -> int:
    return (value + alignment - 1) // alignment * alignment
