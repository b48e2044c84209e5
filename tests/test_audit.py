"""Tests for the hash-chained audit ledger."""

from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from digisign.app import AuditService
from digisign.audit.ledger import GENESIS_HASH, AuditLedger
from digisign.errors import AuditLedgerError


def _ledger(temp_dir: Path) -> AuditLedger:
    return AuditLedger(temp_dir / "audit.jsonl", hmac_key=b"k" * 32)


def test_log_chains_entries(temp_dir: Path) -> None:
    ledger = _ledger(temp_dir)

    first = ledger.log("sign", inputs=["a" * 64], outputs=["b" * 64], args={"accepted": True})
    second = ledger.log("verify", inputs=["b" * 64])

    assert first.sequence == 1
    assert first.previous_hash == GENESIS_HASH
    assert second.sequence == 2
    assert second.previous_hash == first.entry_hash
    assert second.versions["digisign"]
    assert ledger.verify() == (True, None)


def test_ledger_resumes_from_existing_file(temp_dir: Path) -> None:
    _ledger(temp_dir).log("sign")

    reopened = _ledger(temp_dir)
    entry = reopened.log("verify")

    assert entry.sequence == 2
    assert [e.operation for e in reopened.read_all()] == ["sign", "verify"]
    assert reopened.verify() == (True, None)


def test_verify_detects_edited_entry(temp_dir: Path) -> None:
    ledger = _ledger(temp_dir)
    ledger.log("sign", args={"plaintext_length": 11})
    ledger.log("verify", args={"accepted": False})

    lines = ledger.ledger_path.read_text(encoding="utf-8").splitlines()
    record = json.loads(lines[1])
    record["args"]["accepted"] = True
    lines[1] = json.dumps(record)
    ledger.ledger_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    valid, error = ledger.verify()

    assert valid is False
    assert error is not None and "Entry 2" in error


def test_verify_detects_wrong_key(temp_dir: Path) -> None:
    _ledger(temp_dir).log("sign")

    other = AuditLedger(temp_dir / "audit.jsonl", hmac_key=b"x" * 32)
    valid, error = other.verify()

    assert valid is False
    assert "invalid signature" in (error or "")


def test_verify_detects_removed_entry(temp_dir: Path) -> None:
    ledger = _ledger(temp_dir)
    for op in ("sign", "verify", "verify"):
        ledger.log(op)

    lines = ledger.ledger_path.read_text(encoding="utf-8").splitlines()
    del lines[1]
    ledger.ledger_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    assert ledger.verify()[0] is False


def test_verify_reports_unparseable_line(temp_dir: Path) -> None:
    ledger = _ledger(temp_dir)
    ledger.log("sign")
    with open(ledger.ledger_path, "a", encoding="utf-8") as fh:
        fh.write("not json\n")

    valid, error = ledger.verify()

    assert valid is False
    assert "line 2" in (error or "")


def test_default_key_file_is_created(temp_dir: Path) -> None:
    ledger = AuditLedger(temp_dir / "nested" / "audit.jsonl")
    ledger.log("sign")

    assert (temp_dir / "nested" / "audit.key").exists()
    assert ledger.verify() == (True, None)




def test_unparseable_ledger_opens_read_only(temp_dir: Path) -> None:
    _ledger(temp_dir).log("sign")
    with open(temp_dir / "audit.jsonl", "a", encoding="utf-8") as fh:
        fh.write("not json\n")

    reopened = _ledger(temp_dir)

    assert reopened.corruption is not None and "line 2" in reopened.corruption
    valid, error = reopened.verify()
    assert valid is False
    assert "line 2" in (error or "")
    with pytest.raises(AuditLedgerError):
        reopened.log("verify")


def test_verify_detects_truncated_tail(temp_dir: Path) -> None:
    ledger = _ledger(temp_dir)
    ledger.log("sign")
    ledger.log("verify")

    first_line = ledger.ledger_path.read_text(encoding="utf-8").splitlines()[0]
    ledger.ledger_path.write_text(first_line + "\n", encoding="utf-8")

    valid, error = ledger.verify()

    assert valid is False
    assert "truncated" in (error or "")
    with pytest.raises(AuditLedgerError):
        _ledger(temp_dir).log("sign")


def test_verify_detects_deleted_ledger_file(temp_dir: Path) -> None:
    ledger = _ledger(temp_dir)
    ledger.log("sign")

    ledger.ledger_path.unlink()

    assert ledger.verify()[0] is False


def test_verify_detects_missing_tip_record(temp_dir: Path) -> None:
    ledger = _ledger(temp_dir)
    ledger.log("sign")

    (temp_dir / "audit.tip").unlink()

    valid, error = ledger.verify()
    assert valid is False
    assert "tip record is missing" in (error or "")


def test_fresh_ledger_is_valid(temp_dir: Path) -> None:
    ledger = _ledger(temp_dir)

    assert ledger.corruption is None
    assert (temp_dir / "audit.tip").exists()
    assert ledger.verify() == (True, None)


def test_threaded_appends_keep_chain_intact(temp_dir: Path) -> None:
    ledger = _ledger(temp_dir)

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda i: ledger.log("sign", args={"n": i}), range(40)))

    entries = ledger.read_all()
    assert [e.sequence for e in entries] == list(range(1, 41))
    assert ledger.verify() == (True, None)


def test_audit_service_without_ledger() -> None:
    service = AuditService(ledger=None)

    assert service.is_enabled() is False
    assert service.get_entries() == []
    assert service.verify() == (True, None)


def test_audit_service_reads_ledger(temp_dir: Path) -> None:
    ledger = _ledger(temp_dir)
    ledger.log("sign")
    service = AuditService(ledger=ledger)

    assert service.is_enabled() is True
    assert [e.operation for e in service.get_entries()] == ["sign"]
    assert service.verify() == (True, None)


def _log_session(ledger: AuditLedger, fingerprint: str, accepted: list[bool]) -> None:
    ledger.log("sign", args={"key_fingerprint": fingerprint})
    for flag in accepted:
        ledger.log("verify", args={"key_fingerprint": fingerprint, "accepted": flag})


def test_audit_service_filters_by_operation_and_key(temp_dir: Path) -> None:
    ledger = _ledger(temp_dir)
    _log_session(ledger, "ab" * 32, [True, False])
    _log_session(ledger, "cd" * 32, [True])
    service = AuditService(ledger=ledger)

    assert len(service.get_entries(operation="verify")) == 3
    assert len(service.get_entries(key_fingerprint="ABAB")) == 3
    assert len(service.get_entries(operation="sign", key_fingerprint="cdcd")) == 1


def test_audit_service_summary(temp_dir: Path) -> None:
    ledger = _ledger(temp_dir)
    _log_session(ledger, "ab" * 32, [True, False])
    _log_session(ledger, "cd" * 32, [True])
    service = AuditService(ledger=ledger)

    summary = service.summarize(service.get_entries())

    assert summary.total_entries == 5
    assert summary.signed == 2
    assert summary.verified == 3
    assert summary.accepted == 2
    assert summary.rejected == 1
    assert summary.key_fingerprints == ["ab" * 32, "cd" * 32]


def test_audit_service_propagates_unreadable_ledger(temp_dir: Path) -> None:
    _ledger(temp_dir).log("sign")
    with open(temp_dir / "audit.jsonl", "a", encoding="utf-8") as fh:
        fh.write("{\n")
    service = AuditService(ledger=_ledger(temp_dir))

    with pytest.raises(ValueError, match="line 2"):
        service.get_entries()
    assert service.verify()[0] is False
