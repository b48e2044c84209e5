"""Tamper-evident audit trail for sign and verify operations."""

from digisign.audit.ledger import AuditEntry, AuditLedger

__all__ = ["AuditEntry", "AuditLedger"]
