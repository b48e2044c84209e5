"""Byte source port for reading caller-selected inputs."""

from typing import Any, Protocol


class ByteSourcePort(Protocol):
    """Port interface delivering the full contents of a selected input.

    Side effects: Reads from the backing store (offline).
    """

    async def read_bytes(self, handle: Any) -> bytes:
        """Read every byte behind ``handle``.

        Args:
            handle: Adapter-specific reference to the input (e.g. a path)

        Returns:
            The complete contents as an opaque buffer

        Raises:
            OSError: If the input cannot be read
        """
        ...
