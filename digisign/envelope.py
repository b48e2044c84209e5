"""Binary envelope binding a signature to the plaintext it covers.

Layout (little-endian)::

    offset 0    : uint16, N = length of the signature in bytes
    offset 2    : N bytes, raw signature
    offset 2+N  : remaining bytes, original plaintext (may be empty)

The envelope carries no key material; verifying it requires the matching
public key out of band.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Iterator

from pydantic import BaseModel, Field

from digisign.errors import EnvelopeTooLargeError, MalformedEnvelopeError
from digisign.utils.hashing import compute_sha256

_LENGTH_PREFIX = struct.Struct("<H")

PREFIX_SIZE = _LENGTH_PREFIX.size
MAX_SIGNATURE_LENGTH = 0xFFFF

BytesLike = bytes | bytearray | memoryview


@dataclass(frozen=True, slots=True)
class DecodedEnvelope:
    """Signature and plaintext recovered from an envelope."""

    signature: bytes
    plaintext: bytes

    def __iter__(self) -> Iterator[bytes]:
        yield self.signature
        yield self.plaintext


class EnvelopeInfo(BaseModel):
    """Structural summary of an envelope, readable without a key."""

    total_length: int = Field(..., ge=PREFIX_SIZE, description="Envelope size in bytes")
    signature_length: int = Field(
        ..., ge=0, le=MAX_SIGNATURE_LENGTH, description="Declared signature length"
    )
    plaintext_length: int = Field(..., ge=0, description="Bytes following the signature")
    plaintext_sha256: str = Field(..., description="SHA-256 of the embedded plaintext")


def encode(signature: BytesLike, plaintext: BytesLike) -> bytes:
    """Pack ``signature`` and ``plaintext`` into a single envelope.

    Raises:
        EnvelopeTooLargeError: If the signature exceeds 65535 bytes
    """
    length = len(signature)
    if length > MAX_SIGNATURE_LENGTH:
        raise EnvelopeTooLargeError(
            f"Signature of {length} bytes exceeds the {MAX_SIGNATURE_LENGTH}-byte "
            "limit of the envelope length prefix"
        )
    return b"".join((_LENGTH_PREFIX.pack(length), bytes(signature), bytes(plaintext)))


def decode(data: BytesLike) -> DecodedEnvelope:
    """Split an envelope into its signature and plaintext.

    The plaintext is the exact tail of ``data``; no re-encoding happens.

    Raises:
        MalformedEnvelopeError: If ``data`` is shorter than the length prefix,
            or the declared signature length runs past the end of ``data``
    """
    raw = bytes(data)
    if len(raw) < PREFIX_SIZE:
        raise MalformedEnvelopeError(
            f"Envelope is {len(raw)} bytes; at least {PREFIX_SIZE} are required "
            "for the length prefix"
        )

    (length,) = _LENGTH_PREFIX.unpack_from(raw, 0)
    end = PREFIX_SIZE + length
    if len(raw) < end:
        raise MalformedEnvelopeError(
            f"Envelope declares a {length}-byte signature but only "
            f"{len(raw) - PREFIX_SIZE} bytes follow the length prefix"
        )

    return DecodedEnvelope(signature=raw[PREFIX_SIZE:end], plaintext=raw[end:])


def inspect(data: BytesLike) -> EnvelopeInfo:
    """Describe an envelope's layout without verifying it."""
    decoded = decode(data)
    return EnvelopeInfo(
        total_length=len(data),
        signature_length=len(decoded.signature),
        plaintext_length=len(decoded.plaintext),
        plaintext_sha256=compute_sha256(decoded.plaintext),
    )
