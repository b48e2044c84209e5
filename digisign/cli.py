"""digisign CLI application with Typer."""

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer

from digisign import __version__, envelope
from digisign.app import SigningSession
from digisign.app.adapters import CollectingNotifier
from digisign.app.ports import Outcome, OutcomeKind, ResultNotifierPort
from digisign.bootstrap import bootstrap_application
from digisign.config import get_settings, set_settings
from digisign.errors import AuditLedgerError, KeyGenerationError, MalformedEnvelopeError
from digisign.utils.cli_output import json_response

app = typer.Typer(
    name="digisign",
    help="Sign files with an ephemeral RSA key pair and verify signed envelopes",
    add_completion=True,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"digisign version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
    data_dir: Annotated[
        Path | None,
        typer.Option("--data-dir", help="Override data directory"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable debug logging"),
    ] = False,
) -> None:
    """digisign - RSA file signatures in a self-contained envelope."""
    settings = get_settings()
    if data_dir:
        settings.data_dir = data_dir
    set_settings(settings)

    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def _run_session(
    session: SigningSession,
    notifier: ResultNotifierPort,
    sign_paths: list[Path],
    verify_paths: list[Path],
) -> list[Outcome]:
    await session.start()

    outcomes: list[Outcome] = []
    for path in sign_paths:
        try:
            outcomes.append(await session.sign_file(path))
        except OSError as exc:
            outcome = Outcome(
                kind=OutcomeKind.FAILED,
                message=f"Could not read {path}: {exc}",
                error_kind=type(exc).__name__,
            )
            notifier.notify(outcome)
            outcomes.append(outcome)

    for path in verify_paths:
        try:
            outcomes.append(await session.verify_file(path))
        except OSError as exc:
            outcome = Outcome(
                kind=OutcomeKind.FAILED,
                message=f"Could not read {path}: {exc}",
                error_kind=type(exc).__name__,
            )
            notifier.notify(outcome)
            outcomes.append(outcome)

    return outcomes


@app.command("session")
def session_run(
    sign: Annotated[
        list[Path] | None,
        typer.Option("--sign", "-s", help="File to sign (repeatable)"),
    ] = None,
    verify: Annotated[
        list[Path] | None,
        typer.Option("--verify", "-V", help="Signed envelope to verify (repeatable)"),
    ] = None,
    output_dir: Annotated[
        Path | None,
        typer.Option("--output-dir", "-o", help="Directory for signed/verified artifacts"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output outcomes as JSON"),
    ] = False,
) -> None:
    """Generate a key pair, then sign and verify files with it.

    All --sign operations run before all --verify operations. The key pair
    exists only for the lifetime of this command.
    """
    sign_paths = list(sign or [])
    verify_paths = list(verify or [])
    if not sign_paths and not verify_paths:
        typer.secho("Error: Pass at least one --sign or --verify file", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    collector = CollectingNotifier() if json_output else None
    container = bootstrap_application(notifier=collector, output_dir=output_dir)

    try:
        outcomes = asyncio.run(
            _run_session(container.session, container.notifier, sign_paths, verify_paths)
        )
    except KeyGenerationError as exc:
        if json_output:
            typer.echo(json_response("session_outcomes", 1, error=str(exc), outcomes=[]))
        raise typer.Exit(code=2) from exc
    except AuditLedgerError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        typer.secho("Run `digisign audit verify` for details.", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(code=1) from exc

    if json_output:
        typer.echo(
            json_response(
                "session_outcomes",
                1,
                key_fingerprint=container.session.key_pair.fingerprint(),
                outcomes=[outcome.model_dump(mode="json") for outcome in outcomes],
            )
        )

    if not all(outcome.ok for outcome in outcomes):
        raise typer.Exit(code=1)


@app.command("inspect")
def inspect_envelope(
    path: Annotated[Path, typer.Argument(help="Signed envelope to inspect")],
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show the layout of a signed envelope without verifying it."""
    try:
        data = path.read_bytes()
    except OSError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    try:
        info = envelope.inspect(data)
    except MalformedEnvelopeError as exc:
        typer.secho(f"Malformed envelope: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    if json_output:
        typer.echo(json_response("envelope_info", 1, path=str(path), **info.model_dump()))
        return

    typer.echo(f"Envelope:   {path} ({info.total_length} bytes)")
    typer.echo(f"Signature:  {info.signature_length} bytes")
    typer.echo(f"Plaintext:  {info.plaintext_length} bytes")
    typer.echo(f"SHA-256:    {info.plaintext_sha256}")


# Audit subcommand
audit_app = typer.Typer(help="Audit ledger management")
app.add_typer(audit_app, name="audit")


@audit_app.command("show")
def audit_show(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
    tail: Annotated[
        int | None,
        typer.Option("--tail", "-n", help="Show last N entries"),
    ] = None,
    operation: Annotated[
        str | None,
        typer.Option("--operation", help="Only show 'sign' or 'verify' entries"),
    ] = None,
    key: Annotated[
        str | None,
        typer.Option("--key", help="Only show entries for a key fingerprint (prefix)"),
    ] = None,
) -> None:
    """Show audit ledger entries with sign/verify totals."""

    container = bootstrap_application()

    if not container.audit_service.is_enabled():
        typer.secho("No audit ledger found", fg=typer.colors.YELLOW)
        return

    try:
        entries = container.audit_service.get_entries(operation=operation, key_fingerprint=key)
    except ValueError as exc:
        typer.secho(f"Error: Audit ledger is unreadable: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    if not entries:
        typer.secho("No audit ledger entries found", fg=typer.colors.YELLOW)
        return

    summary = container.audit_service.summarize(entries)
    if tail:
        entries = entries[-tail:]

    if json_output:
        typer.echo(
            json_response(
                "audit_log",
                1,
                total_entries=len(entries),
                summary=summary.model_dump(),
                entries=[e.model_dump(mode="json") for e in entries],
            )
        )
        return

    for entry in entries:
        fingerprint = str(entry.args.get("key_fingerprint", ""))[:16]
        status = ""
        if entry.operation == "verify":
            status = " accepted" if entry.args.get("accepted") else " rejected"
        typer.echo(f"{entry.timestamp} | {entry.operation}{status} | key {fingerprint}")

    typer.echo(
        f"{summary.signed} signed, {summary.verified} verified "
        f"({summary.accepted} accepted, {summary.rejected} rejected) "
        f"across {len(summary.key_fingerprints)} key(s)"
    )


@audit_app.command("verify")
def audit_verify() -> None:
    """Verify audit ledger integrity."""
    container = bootstrap_application()

    if not container.audit_service.is_enabled():
        typer.secho("No audit ledger found", fg=typer.colors.YELLOW)
        return

    valid, error = container.audit_service.verify()

    if valid:
        typer.secho("Audit ledger is valid", fg=typer.colors.GREEN)
        return

    message = error or "Audit ledger integrity check failed"
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
