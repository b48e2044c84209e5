"""Filesystem-backed byte source and artifact sink."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from digisign.app.ports import ArtifactSinkPort, ByteSourcePort
from digisign.app.ports.artifacts import SIGNED_LABEL, VERIFIED_LABEL
from digisign.utils.crypto import write_secure_file

logger = logging.getLogger(__name__)


class FileSystemByteSource(ByteSourcePort):
    """Read whole files from disk in a worker thread."""

    async def read_bytes(self, handle: Any) -> bytes:
        path = Path(handle)
        data = await asyncio.to_thread(path.read_bytes)
        logger.debug("Read %d bytes from %s", len(data), path)
        return data


class FileSystemArtifactSink(ArtifactSinkPort):
    """Write artifacts next to each other in a single output directory.

    Signed envelopes are named ``<source><signed_suffix>``. Recovered
    plaintext drops a trailing ``signed_suffix`` from the source name before
    appending ``verified_suffix``.
    """

    def __init__(
        self,
        output_dir: Path,
        *,
        signed_suffix: str = ".signed",
        verified_suffix: str = ".verified",
        mode: int = 0o644,
    ) -> None:
        self.output_dir = Path(output_dir)
        self._signed_suffix = signed_suffix
        self._verified_suffix = verified_suffix
        self._mode = mode

    def target_for(self, *, label: str, source: Any) -> Path:
        name = Path(source).name if source is not None else "artifact"
        if label == SIGNED_LABEL:
            return self.output_dir / f"{name}{self._signed_suffix}"
        if label == VERIFIED_LABEL:
            if name.endswith(self._signed_suffix) and name != self._signed_suffix:
                name = name[: -len(self._signed_suffix)]
            return self.output_dir / f"{name}{self._verified_suffix}"
        raise ValueError(f"Unknown artifact label: {label!r}")

    async def present(self, data: bytes, *, label: str, source: Any) -> str:
        target = self.target_for(label=label, source=source)
        await asyncio.to_thread(write_secure_file, target, data, mode=self._mode)
        logger.debug("%s written to %s (%d bytes)", label, target, len(data))
        return str(target)
