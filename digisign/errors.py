"""Error taxonomy for key generation, signing and envelope handling.

A signature that fails to verify is not an error; it is reported as a
rejected :class:`~digisign.app.signing_service.VerificationResult`.
"""

from __future__ import annotations


class DigisignError(Exception):
    """Base class for all digisign failures."""


class KeyGenerationError(DigisignError):
    """Raised when the crypto backend cannot produce a key pair."""


class SigningError(DigisignError):
    """Raised when the signing primitive fails for otherwise valid inputs."""


class EnvelopeError(DigisignError):
    """Base class for envelope encoding/decoding failures."""


class MalformedEnvelopeError(EnvelopeError, ValueError):
    """Raised when input bytes do not parse as a well-formed envelope."""


class EnvelopeTooLargeError(EnvelopeError, ValueError):
    """Raised when a signature does not fit the 16-bit length prefix."""


class SessionNotReadyError(DigisignError, RuntimeError):
    """Raised when sign/verify is attempted before a key pair exists."""


class AuditLedgerError(DigisignError):
    """Raised when the audit ledger cannot accept new entries."""
