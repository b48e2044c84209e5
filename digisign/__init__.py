"""digisign - Sign files with RSA and verify them from a self-contained envelope.

The envelope binds a PKCS#1 v1.5 signature to the exact bytes it covers, so a
signed file can later be checked and unpacked with the matching public key.
"""

__version__ = "0.1.0"
__author__ = "digisign Contributors"

from digisign.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__"]
