"""Key pair value object and provider port."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from digisign.utils.hashing import compute_sha256

# Fixed algorithm parameters; never negotiated.
SIGNATURE_SCHEME = "RSASSA-PKCS1-v1_5"
KEY_SIZE = 2048
PUBLIC_EXPONENT = 65537
HASH_ALGORITHM_NAME = "SHA-256"


@dataclass(frozen=True, slots=True)
class KeyPair:
    """Immutable signing/verification key pair owned by one session.

    The private half is excluded from ``repr`` and has no export helper.
    """

    public_key: RSAPublicKey
    private_key: RSAPrivateKey = field(repr=False)

    def public_key_der(self) -> bytes:
        return self.public_key.public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )

    def public_key_pem(self) -> bytes:
        """Return the public key as SubjectPublicKeyInfo PEM."""
        return self.public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )

    def fingerprint(self) -> str:
        """SHA-256 hex digest of the DER-encoded public key."""
        return compute_sha256(self.public_key_der())


class KeyPairProviderPort(Protocol):
    """Port interface for key pair generation.

    Side effects: Draws from the platform CSPRNG.
    """

    async def generate_key_pair(self) -> KeyPair:
        """Generate a fresh key pair.

        Returns:
            New key pair using the fixed algorithm parameters

        Raises:
            KeyGenerationError: If the crypto backend cannot produce a key pair
        """
        ...
