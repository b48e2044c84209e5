"""Pytest configuration and fixtures."""

from collections.abc import Generator
from pathlib import Path

import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from digisign.app.ports import KeyPair
from digisign.app.ports.keys import KEY_SIZE, PUBLIC_EXPONENT
from digisign.config import Settings


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Create a temporary directory for tests."""
    return tmp_path


@pytest.fixture
def sample_file(temp_dir: Path) -> Path:
    """Create a sample file to sign."""
    file_path = temp_dir / "hello.txt"
    file_path.write_bytes(b"hello world")
    return file_path


@pytest.fixture
def override_settings(temp_dir: Path) -> Generator[Settings, None, None]:
    """Provide isolated digisign settings scoped to tests."""

    import digisign.config as config_module

    original_settings = getattr(config_module, "_settings", None)

    data_dir = temp_dir / "appdata"
    config_dir = temp_dir / "appconfig"
    output_dir = temp_dir / "out"
    for directory in (data_dir, config_dir, output_dir):
        directory.mkdir(parents=True, exist_ok=True)

    settings = config_module.Settings(
        data_dir=data_dir,
        config_dir=config_dir,
        output_dir=output_dir,
        audit_enabled=True,
    )

    config_module._settings = settings

    try:
        yield settings
    finally:
        config_module._settings = original_settings


def _generate_key_pair() -> KeyPair:
    private_key = rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=KEY_SIZE)
    return KeyPair(public_key=private_key.public_key(), private_key=private_key)


# RSA-2048 generation is slow; share two key pairs across the whole run.
@pytest.fixture(scope="session")
def key_pair() -> KeyPair:
    return _generate_key_pair()


@pytest.fixture(scope="session")
def other_key_pair() -> KeyPair:
    return _generate_key_pair()
