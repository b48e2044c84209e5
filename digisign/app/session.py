"""Session controller tying the pipeline to its collaborators.

A session owns exactly one key pair. Sign and verify stay unavailable until
:meth:`SigningSession.start` has produced it.
"""

from __future__ import annotations

import logging
from typing import Any

from digisign.app.ports import (
    ArtifactSinkPort,
    ByteSourcePort,
    KeyPair,
    KeyPairProviderPort,
    Outcome,
    OutcomeKind,
    ResultNotifierPort,
)
from digisign.app.ports.artifacts import SIGNED_LABEL, VERIFIED_LABEL
from digisign.app.signing_service import SigningPipeline
from digisign.errors import (
    EnvelopeError,
    KeyGenerationError,
    SessionNotReadyError,
    SigningError,
)

logger = logging.getLogger(__name__)


def _failure(exc: Exception, context: str) -> Outcome:
    return Outcome(
        kind=OutcomeKind.FAILED,
        message=f"Something went wrong {context}: {exc}",
        error_kind=type(exc).__name__,
    )


class SigningSession:
    """Run user-triggered sign and verify operations against one key pair."""

    def __init__(
        self,
        *,
        key_provider: KeyPairProviderPort,
        pipeline: SigningPipeline,
        source: ByteSourcePort,
        sink: ArtifactSinkPort,
        notifier: ResultNotifierPort,
    ) -> None:
        self.key_provider = key_provider
        self.pipeline = pipeline
        self.source = source
        self.sink = sink
        self.notifier = notifier
        self._key_pair: KeyPair | None = None

    @property
    def is_ready(self) -> bool:
        return self._key_pair is not None

    @property
    def key_pair(self) -> KeyPair:
        if self._key_pair is None:
            raise SessionNotReadyError("No key pair available; sign and verify are disabled.")
        return self._key_pair

    async def start(self) -> KeyPair:
        """Generate the session key pair.

        Raises:
            KeyGenerationError: If no key pair could be created; the session
                stays disabled
        """
        if self._key_pair is not None:
            return self._key_pair

        try:
            key_pair = await self.key_provider.generate_key_pair()
        except KeyGenerationError as exc:
            self.notifier.notify(_failure(exc, "creating a key pair"))
            raise

        self._key_pair = key_pair
        return key_pair

    async def _present(
        self, data: bytes, *, label: str, source: Any, success: Outcome
    ) -> Outcome:
        """Hand ``data`` to the sink; a failed write becomes a failed outcome."""
        try:
            location = await self.sink.present(data, label=label, source=source)
        except OSError as exc:
            logger.info("Saving %s for %s failed: %s", label.lower(), source, exc)
            return _failure(exc, f"saving the {label.lower()}")
        return success.model_copy(update={"artifact": location})

    async def sign_file(self, handle: Any) -> Outcome:
        """Read ``handle``, sign it and present the envelope.

        Raises:
            SessionNotReadyError: If :meth:`start` has not succeeded
            OSError: If the input cannot be read
        """
        key_pair = self.key_pair
        plaintext = await self.source.read_bytes(handle)

        try:
            signed = await self.pipeline.sign(plaintext, key_pair)
        except (SigningError, EnvelopeError) as exc:
            logger.info("Signing %s failed: %s", handle, exc)
            outcome = _failure(exc, "signing")
        else:
            outcome = await self._present(
                signed,
                label=SIGNED_LABEL,
                source=handle,
                success=Outcome(kind=OutcomeKind.SIGNED, message=SIGNED_LABEL),
            )

        self.notifier.notify(outcome)
        return outcome

    async def verify_file(self, handle: Any) -> Outcome:
        """Read ``handle``, verify it and present the plaintext if accepted.

        Raises:
            SessionNotReadyError: If :meth:`start` has not succeeded
            OSError: If the input cannot be read
        """
        key_pair = self.key_pair
        data = await self.source.read_bytes(handle)

        try:
            result = await self.pipeline.verify(data, key_pair)
        except EnvelopeError as exc:
            logger.info("Verifying %s failed: %s", handle, exc)
            outcome = _failure(exc, "verifying")
        else:
            if result.accepted and result.plaintext is not None:
                outcome = await self._present(
                    result.plaintext,
                    label=VERIFIED_LABEL,
                    source=handle,
                    success=Outcome(kind=OutcomeKind.ACCEPTED, message="Signature is valid."),
                )
            else:
                outcome = Outcome(kind=OutcomeKind.REJECTED, message="Invalid signature!")

        self.notifier.notify(outcome)
        return outcome
