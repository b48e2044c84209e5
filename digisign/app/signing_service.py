"""Sign and verify paths over an explicitly supplied key pair.

Sign:   plaintext -> signature -> envelope
Verify: envelope -> (signature, plaintext) -> accepted/rejected

The signature primitives and the audit write run in worker threads so the
event loop never blocks on crypto or fsync. A rejected signature is a normal
result; only malformed input and primitive failures raise.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from digisign import envelope
from digisign.app.ports import KeyPair, LedgerPort, SignerPort
from digisign.app.ports.keys import HASH_ALGORITHM_NAME, SIGNATURE_SCHEME
from digisign.errors import SigningError
from digisign.utils.hashing import compute_sha256

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class VerificationResult:
    """Outcome of the verify path.

    ``plaintext`` is only populated when the signature was accepted.
    """

    accepted: bool
    plaintext: bytes | None = None


class SigningPipeline:
    """Stateless sign/verify orchestration.

    The key pair is passed into every call; the pipeline never stores it.
    """

    def __init__(self, *, signer_port: SignerPort, ledger_port: LedgerPort | None = None):
        """Initialize the pipeline.

        Args:
            signer_port: Signature primitives
            ledger_port: Audit logging port (optional)
        """
        self.signer = signer_port
        self.ledger = ledger_port

    async def sign(self, plaintext: bytes, key_pair: KeyPair) -> bytes:
        """Sign ``plaintext`` and package it into an envelope.

        Args:
            plaintext: Bytes to protect (may be empty)
            key_pair: Key pair whose private half signs

        Returns:
            Envelope bytes

        Raises:
            SigningError: If the signing primitive fails
            EnvelopeTooLargeError: If the signature cannot be length-prefixed
        """
        data = bytes(plaintext)
        try:
            signature = await asyncio.to_thread(self.signer.sign, data, key_pair.private_key)
        except Exception as exc:  # noqa: BLE001 - surfaced as a typed signing failure
            raise SigningError(f"Something went wrong signing: {exc}") from exc

        packaged = envelope.encode(signature, data)
        logger.debug(
            "Signed %d bytes; envelope is %d bytes (%d-byte signature)",
            len(data),
            len(packaged),
            len(signature),
        )

        if self.ledger is not None:
            await asyncio.to_thread(
                self.ledger.log,
                operation="sign",
                inputs=[compute_sha256(data)],
                outputs=[compute_sha256(packaged)],
                args={
                    "scheme": SIGNATURE_SCHEME,
                    "hash": HASH_ALGORITHM_NAME,
                    "key_fingerprint": key_pair.fingerprint(),
                    "signature_length": len(signature),
                    "plaintext_length": len(data),
                },
            )

        return packaged

    async def verify(self, data: bytes, key_pair: KeyPair) -> VerificationResult:
        """Check an envelope against the public half of ``key_pair``.

        Args:
            data: Envelope bytes
            key_pair: Key pair whose public half verifies

        Returns:
            VerificationResult; plaintext is withheld on rejection

        Raises:
            MalformedEnvelopeError: If ``data`` is not a well-formed envelope
        """
        signature, plaintext = envelope.decode(data)

        valid = await asyncio.to_thread(
            self.signer.verify, plaintext, signature, key_pair.public_key
        )

        if valid:
            logger.info("Signature accepted for %d-byte plaintext", len(plaintext))
        else:
            logger.info("Signature rejected for %d-byte envelope", len(data))

        if self.ledger is not None:
            await asyncio.to_thread(
                self.ledger.log,
                operation="verify",
                inputs=[compute_sha256(bytes(data))],
                outputs=[compute_sha256(plaintext)] if valid else [],
                args={
                    "scheme": SIGNATURE_SCHEME,
                    "hash": HASH_ALGORITHM_NAME,
                    "key_fingerprint": key_pair.fingerprint(),
                    "accepted": valid,
                },
            )

        if not valid:
            return VerificationResult(accepted=False)
        return VerificationResult(accepted=True, plaintext=plaintext)
