"""Append-only audit ledger recording sign and verify operations.

Entries carry digests and key fingerprints only. They are chained by
SHA-256 and sealed with an HMAC. A sealed tip record beside the ledger
stores the last sequence and hash, so dropping trailing entries is
detectable as well as edits and removals inside the chain.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import os
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from digisign import __version__
from digisign.errors import AuditLedgerError
from digisign.utils.crypto import load_or_create_hmac_key, write_secure_file
from digisign.utils.hashing import compute_sha256

GENESIS_HASH = "0" * 64
GENESIS_SIGNATURE = "0" * 64


class AuditEntry(BaseModel):
    """Single audit ledger entry, linked to its predecessor by hash."""

    timestamp: str = Field(..., description="ISO 8601 timestamp in UTC")
    operation: str = Field(..., description="Operation name (e.g., sign, verify)")
    inputs: list[str] = Field(default_factory=list, description="Input SHA-256 digests")
    outputs: list[str] = Field(default_factory=list, description="Output SHA-256 digests")
    args: dict[str, Any] = Field(default_factory=dict, description="Operation metadata")
    versions: dict[str, str] = Field(default_factory=dict, description="Tool versions")
    previous_hash: str = Field(
        default=GENESIS_HASH,
        description="Hash of the previous entry. Genesis entry has 64 zeros.",
    )
    sequence: int = Field(..., ge=1, description="Monotonic sequence number starting at 1.")
    entry_hash: str | None = Field(
        default=None,
        description="SHA-256 of entry content (excluding entry_hash and signature)",
    )
    signature: str | None = Field(
        default=None,
        description="HMAC sealing the entry to the previous signature.",
    )

    def compute_hash(self) -> str:
        data = self.model_dump(
            mode="json",
            exclude={"entry_hash", "signature"},
            exclude_none=True,
        )
        content = json.dumps(data, sort_keys=True, separators=(",", ":"))
        return compute_sha256(content.encode("utf-8"))

    def model_post_init(self, __context: Any) -> None:
        if self.entry_hash is None:
            self.entry_hash = self.compute_hash()


class AuditLedger:
    """JSONL ledger, one entry per line, fsynced on every append.

    A ledger that cannot be read back, or whose tip record disagrees with
    its entries, is opened read-only: ``corruption`` holds the reason and
    :meth:`log` refuses to append. :meth:`verify` reports the same problem.
    """

    def __init__(self, ledger_path: Path, *, hmac_key: bytes | None = None) -> None:
        """Initialize audit ledger.

        Args:
            ledger_path: Path to JSONL ledger file
            hmac_key: Optional sealing key (defaults to a key file beside the ledger)
        """
        self.ledger_path = ledger_path
        self.ledger_path.parent.mkdir(parents=True, exist_ok=True)
        self._tip_path = ledger_path.with_suffix(".tip")

        if hmac_key is None:
            self._hmac_key = load_or_create_hmac_key(ledger_path.with_suffix(".key"), length=32)
        else:
            self._hmac_key = hmac_key

        self._last_hash = GENESIS_HASH
        self._last_sequence = 0
        self._last_signature = GENESIS_SIGNATURE
        self.corruption: str | None = None
        self._lock = threading.Lock()

        self._restore_state()

    def _restore_state(self) -> None:
        try:
            entries = self._read_entries()
        except ValueError as exc:
            self.corruption = str(exc)
            return

        if entries:
            tip = entries[-1]
            self._last_hash = tip.entry_hash or GENESIS_HASH
            self._last_sequence = tip.sequence
            self._last_signature = tip.signature or GENESIS_SIGNATURE
        elif not self._tip_path.exists():
            self._write_tip()
            return

        self.corruption = self._tip_error(entries)

    def _read_entries(self) -> list[AuditEntry]:
        if not self.ledger_path.exists():
            return []

        entries: list[AuditEntry] = []
        with open(self.ledger_path, encoding="utf-8") as fh:
            for line_num, raw_line in enumerate(fh, 1):
                line = raw_line.strip()
                if not line:
                    continue
                try:
                    entries.append(AuditEntry.model_validate_json(line))
                except ValueError as exc:
                    raise ValueError(
                        f"Invalid entry at line {line_num} in {self.ledger_path}: {exc}"
                    ) from exc

        return entries

    def _compute_signature(self, entry: AuditEntry, previous_signature: str) -> str:
        payload = "|".join(
            [
                str(entry.sequence),
                entry.previous_hash,
                entry.entry_hash or "",
                previous_signature,
            ]
        ).encode("utf-8")
        return hmac.new(self._hmac_key, payload, hashlib.sha256).hexdigest()

    def _seal_tip(self, last_sequence: int, last_hash: str | None) -> str:
        payload = f"tip|{last_sequence}|{last_hash or GENESIS_HASH}".encode("utf-8")
        return hmac.new(self._hmac_key, payload, hashlib.sha256).hexdigest()

    def _write_tip(self) -> None:
        last_hash = self._last_hash if self._last_sequence else None
        record = {
            "last_sequence": self._last_sequence,
            "last_hash": last_hash,
            "seal": self._seal_tip(self._last_sequence, last_hash),
        }
        data = json.dumps(record, sort_keys=True, separators=(",", ":")).encode("utf-8")
        write_secure_file(self._tip_path, data, mode=0o600, fsync=True)

    def _load_tip(self) -> dict[str, Any] | None:
        """Return the sealed tip record, or None when it does not exist.

        Raises:
            ValueError: If the record is unreadable or its seal does not match
        """
        try:
            raw = self._tip_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

        record = json.loads(raw)
        if not isinstance(record, dict):
            raise ValueError("tip record is not an object")

        expected = self._seal_tip(int(record.get("last_sequence", 0)), record.get("last_hash"))
        seal = record.get("seal")
        if not isinstance(seal, str) or not hmac.compare_digest(expected, seal):
            raise ValueError("tip record seal mismatch")

        return record

    def _tip_error(self, entries: list[AuditEntry]) -> str | None:
        try:
            tip = self._load_tip()
        except (TypeError, ValueError) as exc:
            return f"Audit tip record integrity failure: {exc}"

        last_sequence = entries[-1].sequence if entries else 0
        last_hash = entries[-1].entry_hash if entries else None

        if tip is None:
            if last_sequence:
                return "Audit tip record is missing."
            return None

        expected_sequence = int(tip.get("last_sequence", 0))
        if expected_sequence != last_sequence:
            return (
                f"Audit ledger ends at entry {last_sequence} but its tip record expects "
                f"{expected_sequence}; entries may have been truncated."
            )
        if tip.get("last_hash") != last_hash:
            return "Audit tip hash mismatch; possible truncation or tampering detected."

        return None

    def log(
        self,
        operation: str,
        inputs: list[str] | None = None,
        outputs: list[str] | None = None,
        args: dict[str, Any] | None = None,
    ) -> AuditEntry:
        """Append an operation to the ledger.

        Args:
            operation: Operation name
            inputs: Input digests
            outputs: Output digests
            args: Operation metadata

        Returns:
            The created audit entry

        Raises:
            AuditLedgerError: If the ledger was found corrupt when opened
        """
        with self._lock:
            if self.corruption is not None:
                raise AuditLedgerError(
                    f"Refusing to append to corrupt audit ledger {self.ledger_path}: "
                    f"{self.corruption}"
                )

            sequence = self._last_sequence + 1
            entry = AuditEntry(
                timestamp=datetime.now(UTC).isoformat(),
                operation=operation,
                inputs=inputs or [],
                outputs=outputs or [],
                args=args or {},
                versions={"digisign": __version__},
                previous_hash=self._last_hash,
                sequence=sequence,
            )
            entry.signature = self._compute_signature(entry, self._last_signature)

            with open(self.ledger_path, "a", encoding="utf-8") as fh:
                fh.write(entry.model_dump_json() + "\n")
                fh.flush()
                os.fsync(fh.fileno())

            self._last_sequence = sequence
            self._last_hash = entry.entry_hash or GENESIS_HASH
            self._last_signature = entry.signature
            self._write_tip()

        return entry

    def read_all(self) -> list[AuditEntry]:
        """Read all entries in chronological order.

        Raises:
            ValueError: If a line cannot be parsed
        """
        return self._read_entries()

    def verify(self) -> tuple[bool, str | None]:
        """Verify the hash chain, HMAC seals and tip record.

        Returns:
            Tuple of (is_valid, error_message). error_message is None if valid.
        """
        try:
            entries = self._read_entries()
        except ValueError as exc:
            return False, str(exc)

        previous_hash = GENESIS_HASH
        previous_signature = GENESIS_SIGNATURE

        for idx, entry in enumerate(entries, 1):
            if entry.sequence != idx:
                return (
                    False,
                    f"Entry {idx} sequence mismatch (expected {idx}, got {entry.sequence}).",
                )

            expected_hash = entry.compute_hash()
            if entry.entry_hash is None or not hmac.compare_digest(entry.entry_hash, expected_hash):
                return False, f"Entry {idx} has invalid hash; ledger corrupted or tampered."

            if entry.previous_hash != previous_hash:
                return (
                    False,
                    f"Entry {idx} breaks hash chain (expected previous_hash='{previous_hash}', "
                    f"found '{entry.previous_hash}').",
                )

            expected_signature = self._compute_signature(entry, previous_signature)
            if entry.signature is None or not hmac.compare_digest(
                entry.signature, expected_signature
            ):
                return False, f"Entry {idx} has invalid signature; ledger may have been tampered."

            previous_hash = entry.entry_hash
            previous_signature = entry.signature

        tip_error = self._tip_error(entries)
        if tip_error is not None:
            return False, tip_error

        return True, None
