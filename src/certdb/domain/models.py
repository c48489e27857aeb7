"""
Domain models — immutable value objects for certificate database records.

On-disk layout of one certificate record (all integers little-endian):

    0x00                 u32   signature type
    0x04                 bytes signature (length from the size table)
    ...                  zero padding up to the next 0x40 boundary
    body_start           0x88  body: issuer[0x40], key type u32, name[0x40], expiration u32
    body_start + 0x88    bytes public key (length from the size table)

A certificate database is an 8-byte header (magic 'CERT', payload size)
followed by records packed back to back.

All models are frozen dataclasses. Certificate construction checks that the
signature and public key lengths agree with their type codes, so any
Certificate that exists can be encoded.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import ClassVar

from certdb.domain.sizes import BODY_ALIGNMENT, align_up, public_key_size, signature_size

NAME_LENGTH = 0x40
ISSUER_LENGTH = 0x40

#: Certificates that must be present to build installable content packages.
CIA_CERT_NAMES: tuple[str, ...] = ("CA00000003", "XS0000000c", "CP0000000b")


def make_magic(tag: str) -> int:
    """Pack a four-character ASCII tag into the u32 it reads as on disk."""
    raw = tag.encode("ascii")
    if len(raw) != 4:
        raise ValueError(f"Magic tag must be 4 ASCII characters, got {tag!r}")
    return int.from_bytes(raw, "little")


CERTS_DB_MAGIC = make_magic("CERT")


def _fixed_buffer(value: bytes, width: int, field_name: str) -> bytes:
    if len(value) > width:
        raise ValueError(f"{field_name} is {len(value)} bytes, at most {width:#x} allowed")
    return bytes(value).ljust(width, b"\x00")


def _check_u32(value: int, field_name: str) -> None:
    if not 0 <= value <= 0xFFFFFFFF:
        raise ValueError(f"{field_name} {value!r} does not fit in 32 bits")


def string_from_fixed_buffer(buffer: bytes) -> str:
    """
    Text up to the first NUL of a zero-terminated, zero-padded buffer.

    Decoded as latin-1 so every byte maps to its own character and distinct
    names never collide as registry keys.
    """
    return buffer.split(b"\x00", 1)[0].decode("latin-1")


@dataclass(frozen=True, slots=True)
class CertificateBody:
    """
    Fixed-size certificate body.

    `issuer` and `expiration_time` are carried through untouched; only
    `key_type` (sizes the public key) and `name` (registry key) matter here.
    Buffers shorter than their fixed width are zero-padded.
    """

    FORMAT: ClassVar[str] = f"<{ISSUER_LENGTH}sI{NAME_LENGTH}sI"
    SIZE: ClassVar[int] = struct.calcsize(FORMAT)

    issuer: bytes = field(repr=False)
    key_type: int
    name: bytes
    expiration_time: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "issuer", _fixed_buffer(self.issuer, ISSUER_LENGTH, "issuer"))
        object.__setattr__(self, "name", _fixed_buffer(self.name, NAME_LENGTH, "name"))
        _check_u32(self.key_type, "key_type")
        _check_u32(self.expiration_time, "expiration_time")

    @property
    def name_string(self) -> str:
        return string_from_fixed_buffer(self.name)

    @property
    def issuer_string(self) -> str:
        return string_from_fixed_buffer(self.issuer)

    def export(self) -> bytes:
        return struct.pack(
            self.FORMAT, self.issuer, self.key_type, self.name, self.expiration_time
        )

    @classmethod
    def parse(cls, data: bytes, offset: int = 0) -> CertificateBody:
        """
        Read a body at `offset`, field by field.

        The caller is responsible for checking that SIZE bytes are available.
        """
        issuer, key_type, name, expiration_time = struct.unpack_from(cls.FORMAT, data, offset)
        return cls(issuer=issuer, key_type=key_type, name=name, expiration_time=expiration_time)


@dataclass(frozen=True, slots=True)
class Certificate:
    """
    One decoded certificate record.

    Owns its signature and public key bytes. Raises ValueError when the
    signature or public key length disagrees with the size table entry for
    its type code, or when either type code is unknown.
    """

    signature_type: int
    signature: bytes = field(repr=False)
    body: CertificateBody
    public_key: bytes = field(repr=False)

    def __post_init__(self) -> None:
        _check_u32(self.signature_type, "signature_type")
        object.__setattr__(self, "signature", bytes(self.signature))
        object.__setattr__(self, "public_key", bytes(self.public_key))

        expected_signature = signature_size(self.signature_type)
        if expected_signature.is_failure():
            raise ValueError(expected_signature.error().message)
        if len(self.signature) != expected_signature.value():
            raise ValueError(
                f"Signature type {self.signature_type:#x} needs "
                f"{expected_signature.value():#x} bytes, got {len(self.signature):#x}"
            )

        expected_key = public_key_size(self.body.key_type)
        if expected_key.is_failure():
            raise ValueError(expected_key.error().message)
        if len(self.public_key) != expected_key.value():
            raise ValueError(
                f"Public key type {self.body.key_type:#x} needs "
                f"{expected_key.value():#x} bytes, got {len(self.public_key):#x}"
            )

    @property
    def name(self) -> str:
        return self.body.name_string

    @property
    def key_type(self) -> int:
        return self.body.key_type

    @property
    def body_offset(self) -> int:
        """Offset of the body from the start of the record."""
        return align_up(4 + len(self.signature), BODY_ALIGNMENT)

    @property
    def record_size(self) -> int:
        return self.body_offset + CertificateBody.SIZE + len(self.public_key)


@dataclass(frozen=True, slots=True)
class DecodedRecord:
    """A decoded certificate and the number of bytes its record occupied."""

    certificate: Certificate
    size: int


@dataclass(frozen=True, slots=True)
class DatabaseHeader:
    """Certificate database header. `size` excludes the header itself."""

    FORMAT: ClassVar[str] = "<II"
    SIZE: ClassVar[int] = struct.calcsize(FORMAT)

    magic: int
    size: int

    def export(self) -> bytes:
        return struct.pack(self.FORMAT, self.magic, self.size)

    @classmethod
    def parse(cls, data: bytes) -> DatabaseHeader:
        magic, size = struct.unpack_from(cls.FORMAT, data, 0)
        return cls(magic=magic, size=size)

    @property
    def total_size(self) -> int:
        return self.size + self.SIZE
