"""CLI integration smoke tests."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from digisign import envelope
from digisign.cli import app


def test_cli_version() -> None:
    result = CliRunner().invoke(app, ["--version"])

    assert result.exit_code == 0
    assert "digisign version" in result.stdout


def test_cli_session_signs_and_verifies(temp_dir: Path, override_settings, sample_file: Path) -> None:
    """`digisign session` signs then verifies within one key pair lifetime."""

    out_dir = override_settings.get_output_dir()
    signed_path = out_dir / "hello.txt.signed"

    result = CliRunner().invoke(
        app,
        [
            "session",
            "--sign",
            str(sample_file),
            "--verify",
            str(signed_path),
        ],
    )

    assert result.exit_code == 0, result.stdout
    assert "Signed file" in result.stdout
    assert "Signature is valid." in result.stdout

    signature, plaintext = envelope.decode(signed_path.read_bytes())
    assert len(signature) == 256
    assert plaintext == b"hello world"
    assert (out_dir / "hello.txt.verified").read_bytes() == b"hello world"

    audit_path = override_settings.get_audit_path()
    operations = [
        json.loads(line)["operation"]
        for line in audit_path.read_text(encoding="utf-8").splitlines()
        if line.strip()
    ]
    assert operations == ["sign", "verify"]
    assert "hello world" not in audit_path.read_text(encoding="utf-8")


def test_cli_session_rejects_foreign_envelope(temp_dir: Path, override_settings) -> None:
    """An envelope signed in an earlier session cannot verify in a new one."""

    source = temp_dir / "doc.bin"
    source.write_bytes(b"\x00\x01\x02")
    runner = CliRunner()
    out_dir = override_settings.get_output_dir()

    first = runner.invoke(app, ["session", "--sign", str(source)])
    assert first.exit_code == 0, first.stdout

    second = runner.invoke(
        app, ["session", "--verify", str(out_dir / "doc.bin.signed"), "--json"]
    )

    assert second.exit_code == 1
    payload = json.loads(second.stdout)
    assert payload["schema_id"] == "session_outcomes"
    assert [o["kind"] for o in payload["outcomes"]] == ["rejected"]
    assert not (out_dir / "doc.bin.verified").exists()


def test_cli_session_reports_malformed_and_missing(temp_dir: Path, override_settings) -> None:
    junk = temp_dir / "junk.signed"
    junk.write_bytes(b"\x00")

    result = CliRunner().invoke(
        app,
        [
            "session",
            "--verify",
            str(junk),
            "--verify",
            str(temp_dir / "missing.signed"),
            "--json",
        ],
    )

    assert result.exit_code == 1
    outcomes = json.loads(result.stdout)["outcomes"]
    assert [o["kind"] for o in outcomes] == ["failed", "failed"]
    assert outcomes[0]["error_kind"] == "MalformedEnvelopeError"
    assert outcomes[1]["error_kind"] == "FileNotFoundError"


def test_cli_session_requires_an_operation(override_settings) -> None:
    result = CliRunner().invoke(app, ["session"])

    assert result.exit_code == 1


def test_cli_inspect(temp_dir: Path) -> None:
    path = temp_dir / "doc.signed"
    path.write_bytes(envelope.encode(b"s" * 256, b"hello world"))

    result = CliRunner().invoke(app, ["inspect", str(path), "--json"])

    assert result.exit_code == 0, result.stdout
    payload = json.loads(result.stdout)
    assert payload["signature_length"] == 256
    assert payload["plaintext_length"] == 11


def test_cli_inspect_malformed(temp_dir: Path) -> None:
    path = temp_dir / "bad.signed"
    path.write_bytes(b"\xff\xff\x00")

    result = CliRunner().invoke(app, ["inspect", str(path)])

    assert result.exit_code == 1
    assert "Malformed envelope" in result.output


def test_cli_audit_verify_after_session(override_settings, sample_file: Path) -> None:
    runner = CliRunner()
    assert runner.invoke(app, ["session", "--sign", str(sample_file)]).exit_code == 0

    verify = runner.invoke(app, ["audit", "verify"])
    show = runner.invoke(app, ["audit", "show", "--json"])

    assert verify.exit_code == 0
    assert "Audit ledger is valid" in verify.stdout
    assert json.loads(show.stdout)["total_entries"] == 1


def test_cli_audit_reports_unparseable_ledger(
    temp_dir: Path, override_settings, sample_file: Path
) -> None:
    runner = CliRunner()
    assert runner.invoke(app, ["session", "--sign", str(sample_file)]).exit_code == 0
    with open(override_settings.get_audit_path(), "a", encoding="utf-8") as fh:
        fh.write("not json\n")

    verify = runner.invoke(app, ["audit", "verify"])
    show = runner.invoke(app, ["audit", "show"])

    assert verify.exit_code == 1
    assert verify.exception is None or isinstance(verify.exception, SystemExit)
    assert "Invalid entry at line 2" in verify.output
    assert show.exit_code == 1
    assert "unreadable" in show.output


def test_cli_session_refuses_corrupt_ledger(
    temp_dir: Path, override_settings, sample_file: Path
) -> None:
    runner = CliRunner()
    assert runner.invoke(app, ["session", "--sign", str(sample_file)]).exit_code == 0
    with open(override_settings.get_audit_path(), "a", encoding="utf-8") as fh:
        fh.write("not json\n")

    other = temp_dir / "other.txt"
    other.write_bytes(b"unaudited")
    result = runner.invoke(app, ["session", "--sign", str(other)])

    assert result.exit_code == 1
    assert "Refusing to append" in result.output
    assert not (override_settings.get_output_dir() / "other.txt.signed").exists()


def test_cli_session_reports_unwritable_output_dir(
    temp_dir: Path, override_settings, sample_file: Path
) -> None:
    blocker = temp_dir / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    result = CliRunner().invoke(
        app,
        ["session", "--sign", str(sample_file), "--output-dir", str(blocker / "sub"), "--json"],
    )

    assert result.exit_code == 1
    [outcome] = json.loads(result.stdout)["outcomes"]
    assert outcome["kind"] == "failed"
    assert "saving the signed file" in outcome["message"]
    assert "Could not read" not in outcome["message"]


def test_cli_audit_show_filters_and_summarizes(override_settings, sample_file: Path) -> None:
    runner = CliRunner()
    signed_path = override_settings.get_output_dir() / "hello.txt.signed"
    session = runner.invoke(
        app, ["session", "--sign", str(sample_file), "--verify", str(signed_path)]
    )
    assert session.exit_code == 0, session.output

    show = runner.invoke(app, ["audit", "show", "--operation", "verify", "--json"])
    text = runner.invoke(app, ["audit", "show"])

    payload = json.loads(show.stdout)
    assert payload["total_entries"] == 1
    assert payload["summary"]["accepted"] == 1
    assert payload["summary"]["signed"] == 0
    assert "1 signed, 1 verified (1 accepted, 0 rejected) across 1 key(s)" in text.stdout
