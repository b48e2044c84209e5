"""Concrete adapters wiring application ports to built-in implementations."""

from __future__ import annotations

from .notifier import CollectingNotifier, EchoNotifier
from .rsa_keys import PKCS1v15Signer, RSAKeyPairProvider
from .storage import FileSystemArtifactSink, FileSystemByteSource

__all__ = [
    "CollectingNotifier",
    "EchoNotifier",
    "FileSystemArtifactSink",
    "FileSystemByteSource",
    "PKCS1v15Signer",
    "RSAKeyPairProvider",
]
