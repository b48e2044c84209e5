"""Artifact sink port for offering produced bytes to the user."""

from typing import Any, Protocol

SIGNED_LABEL = "Signed file"
VERIFIED_LABEL = "Verified file"


class ArtifactSinkPort(Protocol):
    """Port interface receiving signed envelopes and verified plaintext.

    Side effects: Persists or publishes the artifact.
    """

    async def present(self, data: bytes, *, label: str, source: Any) -> str:
        """Offer ``data`` to the user.

        Args:
            data: Artifact bytes
            label: Human-readable description (e.g. "Signed file")
            source: Handle of the input the artifact was derived from

        Returns:
            Locator of the presented artifact (e.g. a file path)
        """
        ...
