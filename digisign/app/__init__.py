"""Application layer for digisign.

This layer orchestrates signing and verification without direct filesystem
or terminal I/O. All side effects are delegated to adapters via port interfaces.
"""

__all__ = [
    "AuditService",
    "AuditSummary",
    "SigningPipeline",
    "SigningSession",
    "VerificationResult",
]

from digisign.app.audit_service import AuditService, AuditSummary
from digisign.app.session import SigningSession
from digisign.app.signing_service import SigningPipeline, VerificationResult
