"""Ledger port interface for audit trail operations."""

from typing import Any, Protocol

from pydantic import BaseModel, Field


class AuditRecord(BaseModel):
    """Normalized view of an audit ledger entry."""

    timestamp: str = Field(..., description="ISO-8601 timestamp")
    operation: str = Field(..., description="Operation name recorded in the ledger")
    inputs: list[str] = Field(default_factory=list, description="Input digests for the event")
    outputs: list[str] = Field(default_factory=list, description="Output digests for the event")
    args: dict[str, Any] = Field(default_factory=dict, description="Additional parameters")


class LedgerPort(Protocol):
    """Port interface for audit ledger operations.

    Adapters implementing this port must provide:
    - Append-only audit logging
    - Hash chain verification

    Side effects: Writes to audit ledger (offline).
    """

    def log(
        self,
        operation: str,
        inputs: list[str],
        outputs: list[str],
        args: dict[str, Any],
    ) -> None:
        """Log an operation to the audit ledger.

        Args:
            operation: Operation name (e.g., "sign", "verify")
            inputs: Input digests
            outputs: Output digests
            args: Additional metadata (never key material or plaintext)
        """
        ...

    def verify(self) -> tuple[bool, str | None]:
        """Verify audit ledger integrity.

        Returns:
            Tuple of (is_valid, error_message)
        """
        ...

    def read_all(self) -> list[AuditRecord]:
        """Read all audit entries."""
        ...
