"""Port interfaces for the digisign application layer.

These protocol interfaces define contracts for adapters.
Application services depend on these ports, never on concrete implementations.
"""

__all__ = [
    "ArtifactSinkPort",
    "AuditRecord",
    "ByteSourcePort",
    "KeyPair",
    "KeyPairProviderPort",
    "LedgerPort",
    "Outcome",
    "OutcomeKind",
    "ResultNotifierPort",
    "SignerPort",
]

from digisign.app.ports.artifacts import ArtifactSinkPort
from digisign.app.ports.keys import KeyPair, KeyPairProviderPort
from digisign.app.ports.ledger import AuditRecord, LedgerPort
from digisign.app.ports.notifier import Outcome, OutcomeKind, ResultNotifierPort
from digisign.app.ports.signer import SignerPort
from digisign.app.ports.source import ByteSourcePort
