"""Application bootstrap wiring ports, adapters, and services."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from digisign.app import AuditService, SigningPipeline, SigningSession
from digisign.app.adapters import (
    EchoNotifier,
    FileSystemArtifactSink,
    FileSystemByteSource,
    PKCS1v15Signer,
    RSAKeyPairProvider,
)
from digisign.app.ports import (
    ArtifactSinkPort,
    ByteSourcePort,
    KeyPairProviderPort,
    LedgerPort,
    ResultNotifierPort,
)
from digisign.audit.ledger import AuditLedger
from digisign.config import Settings, get_settings


@dataclass(slots=True)
class ApplicationContainer:
    """Aggregates wired services and adapters for the CLI layer."""

    settings: Settings
    pipeline: SigningPipeline
    session: SigningSession
    audit_service: AuditService
    ledger_port: LedgerPort
    key_provider: KeyPairProviderPort
    source: ByteSourcePort
    sink: ArtifactSinkPort
    notifier: ResultNotifierPort


class NoOpLedger:
    """Ledger implementation that drops all writes."""

    def log(self, *args: Any, **kwargs: Any) -> None:
        return None

    def read_all(self) -> list[dict[str, Any]]:
        return []

    def verify(self) -> tuple[bool, str | None]:
        return (True, None)


def _create_ledger(settings: Settings) -> AuditLedger | None:
    if not settings.audit_enabled:
        return None
    return AuditLedger(settings.get_audit_path(), hmac_key=settings.get_audit_hmac_key())


def bootstrap_application(
    settings: Settings | None = None,
    *,
    notifier: ResultNotifierPort | None = None,
    output_dir: Path | None = None,
) -> ApplicationContainer:
    """Instantiate adapters and services for CLI consumption."""

    active_settings = settings or get_settings()

    ledger = _create_ledger(active_settings)

    key_provider = RSAKeyPairProvider()
    source = FileSystemByteSource()
    sink = FileSystemArtifactSink(
        output_dir if output_dir is not None else active_settings.get_output_dir(),
        signed_suffix=active_settings.signed_suffix,
        verified_suffix=active_settings.verified_suffix,
    )
    active_notifier = notifier or EchoNotifier()

    pipeline = SigningPipeline(signer_port=PKCS1v15Signer(), ledger_port=ledger)
    session = SigningSession(
        key_provider=key_provider,
        pipeline=pipeline,
        source=source,
        sink=sink,
        notifier=active_notifier,
    )

    return ApplicationContainer(
        settings=active_settings,
        pipeline=pipeline,
        session=session,
        audit_service=AuditService(ledger=ledger),
        ledger_port=ledger if ledger is not None else NoOpLedger(),  # type: ignore[arg-type]
        key_provider=key_provider,
        source=source,
        sink=sink,
        notifier=active_notifier,
    )
