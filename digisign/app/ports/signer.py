"""Signer port interface for the signature primitives."""

from typing import Protocol

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey


class SignerPort(Protocol):
    """Port interface for cryptographic signing operations.

    Side effects: None (pure computation).
    """

    def sign(self, data: bytes, private_key: RSAPrivateKey) -> bytes:
        """Sign data.

        Args:
            data: Data to sign
            private_key: Key producing the signature

        Returns:
            Signature bytes
        """
        ...

    def verify(self, data: bytes, signature: bytes, public_key: RSAPublicKey) -> bool:
        """Verify signature.

        Args:
            data: Original data
            signature: Signature to verify
            public_key: Key checking the signature

        Returns:
            True if signature is valid
        """
        ...
