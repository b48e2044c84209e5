"""Read-side queries over the signing audit trail."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field

from digisign.app.ports import AuditRecord, LedgerPort


class AuditSummary(BaseModel):
    """Counts of recorded sign and verify operations."""

    total_entries: int = 0
    signed: int = 0
    verified: int = 0
    accepted: int = 0
    rejected: int = 0
    key_fingerprints: list[str] = Field(
        default_factory=list, description="Distinct signing keys, in first-seen order"
    )


@dataclass(slots=True)
class AuditService:
    """Query and verify the audit ledger written by the signing pipeline."""

    ledger: LedgerPort | None

    def is_enabled(self) -> bool:
        return self.ledger is not None

    def get_entries(
        self,
        *,
        operation: str | None = None,
        key_fingerprint: str | None = None,
    ) -> list[AuditRecord]:
        """Return ledger entries, optionally narrowed.

        Args:
            operation: Keep only ``sign`` or ``verify`` entries
            key_fingerprint: Keep entries whose key fingerprint starts with this prefix

        Raises:
            ValueError: If a ledger line cannot be parsed
        """
        if self.ledger is None:
            return []

        entries = self.ledger.read_all()
        if operation is not None:
            entries = [e for e in entries if e.operation == operation]
        if key_fingerprint:
            prefix = key_fingerprint.lower()
            entries = [
                e for e in entries if str(e.args.get("key_fingerprint", "")).startswith(prefix)
            ]
        return entries

    @staticmethod
    def summarize(entries: list[AuditRecord]) -> AuditSummary:
        summary = AuditSummary(total_entries=len(entries))
        for entry in entries:
            if entry.operation == "sign":
                summary.signed += 1
            elif entry.operation == "verify":
                summary.verified += 1
                if entry.args.get("accepted"):
                    summary.accepted += 1
                else:
                    summary.rejected += 1

            fingerprint = entry.args.get("key_fingerprint")
            if fingerprint and fingerprint not in summary.key_fingerprints:
                summary.key_fingerprints.append(fingerprint)
        return summary

    def verify(self) -> tuple[bool, str | None]:
        """Verify ledger integrity; a disabled ledger counts as valid."""
        if self.ledger is None:
            return True, None
        return self.ledger.verify()
