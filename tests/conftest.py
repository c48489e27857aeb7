"""
Shared test fixtures and builders for the certdb test suite.

Certificate databases are synthesized here instead of shipped as binary
fixtures: signatures and keys are deterministic byte patterns of the right
length for their type codes.
"""

from __future__ import annotations

import pytest

from certdb.domain.models import (
    CERTS_DB_MAGIC,
    CIA_CERT_NAMES,
    Certificate,
    CertificateBody,
    DatabaseHeader,
)
from certdb.domain.sizes import PublicKeyType, SignatureType, public_key_size, signature_size
from certdb.loader import build_database


def pattern(length: int, seed: int = 0) -> bytes:
    """Deterministic non-zero byte pattern, so misplaced copies show up in asserts."""
    return bytes((seed + i) % 255 + 1 for i in range(length))


def make_certificate(
    name: str = "XS0000000c",
    signature_type: int = SignatureType.RSA_2048_SHA256,
    key_type: int = PublicKeyType.RSA_2048,
    issuer: str = "Root-CA00000003",
    expiration_time: int = 0x5A5A5A5A,
    seed: int = 7,
) -> Certificate:
    """Build a valid certificate for the given type codes."""
    return Certificate(
        signature_type=signature_type,
        signature=pattern(signature_size(signature_type).value(), seed),
        body=CertificateBody(
            issuer=issuer.encode("ascii"),
            key_type=key_type,
            name=name.encode("ascii"),
            expiration_time=expiration_time,
        ),
        public_key=pattern(public_key_size(key_type).value(), seed + 1),
    )


def make_cia_certificates() -> list[Certificate]:
    """The three certificates content package building requires."""
    return [
        make_certificate(
            name="CA00000003",
            signature_type=SignatureType.RSA_4096_SHA256,
            key_type=PublicKeyType.RSA_2048,
            issuer="Root",
            seed=1,
        ),
        make_certificate(
            name="XS0000000c",
            signature_type=SignatureType.RSA_2048_SHA256,
            key_type=PublicKeyType.RSA_2048,
            issuer="Root-CA00000003",
            seed=2,
        ),
        make_certificate(
            name="CP0000000b",
            signature_type=SignatureType.RSA_2048_SHA256,
            key_type=PublicKeyType.RSA_2048,
            issuer="Root-CA00000003",
            seed=3,
        ),
    ]


def raw_database(payload: bytes, size: int | None = None, magic: int = CERTS_DB_MAGIC) -> bytes:
    """Header + payload with a freely chosen declared size and magic."""
    header = DatabaseHeader(magic=magic, size=len(payload) if size is None else size)
    return header.export() + payload


@pytest.fixture()
def cia_certificates() -> list[Certificate]:
    return make_cia_certificates()


@pytest.fixture()
def cia_database(cia_certificates: list[Certificate]) -> bytes:
    """A valid database image containing exactly the required certificates."""
    return build_database(cia_certificates)


@pytest.fixture()
def required_names() -> tuple[str, ...]:
    return CIA_CERT_NAMES
