"""RSA key generation and PKCS#1 v1.5 signing backed by ``cryptography``."""

from __future__ import annotations

import asyncio
import logging

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from digisign.app.ports import KeyPair, KeyPairProviderPort, SignerPort
from digisign.app.ports.keys import KEY_SIZE, PUBLIC_EXPONENT
from digisign.errors import KeyGenerationError

logger = logging.getLogger(__name__)


class RSAKeyPairProvider(KeyPairProviderPort):
    """Generate 2048-bit RSA key pairs with public exponent 65537."""

    def __init__(self, *, key_size: int = KEY_SIZE, public_exponent: int = PUBLIC_EXPONENT) -> None:
        self._key_size = key_size
        self._public_exponent = public_exponent

    def _generate(self) -> KeyPair:
        private_key = rsa.generate_private_key(
            public_exponent=self._public_exponent,
            key_size=self._key_size,
        )
        return KeyPair(public_key=private_key.public_key(), private_key=private_key)

    async def generate_key_pair(self) -> KeyPair:
        try:
            key_pair = await asyncio.to_thread(self._generate)
        except Exception as exc:  # noqa: BLE001 - any backend failure is fatal to the session
            raise KeyGenerationError(f"Could not create a key pair: {exc}") from exc

        logger.info("Generated %d-bit RSA key pair %s", self._key_size, key_pair.fingerprint())
        return key_pair


class PKCS1v15Signer(SignerPort):
    """RSASSA-PKCS1-v1_5 with SHA-256 over the raw message bytes."""

    def sign(self, data: bytes, private_key: rsa.RSAPrivateKey) -> bytes:
        return private_key.sign(data, padding.PKCS1v15(), hashes.SHA256())

    def verify(self, data: bytes, signature: bytes, public_key: rsa.RSAPublicKey) -> bool:
        try:
            public_key.verify(signature, data, padding.PKCS1v15(), hashes.SHA256())
        except InvalidSignature:
            return False
        return True
