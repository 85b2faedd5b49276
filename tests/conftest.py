"""Shared test fixtures for aumai-binseal."""

from __future__ import annotations

from pathlib import Path

import pytest

from aumai_binseal.core import BundleSigner, BundleVerifier
from aumai_binseal.keys import KeyManager
from aumai_binseal.models import KeyPair

# ---------------------------------------------------------------------------
# Key-pair fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def key_manager() -> KeyManager:
    """A shared KeyManager instance (stateless, safe to share)."""
    return KeyManager()


@pytest.fixture(scope="session")
def keypair(key_manager: KeyManager) -> KeyPair:
    return key_manager.generate()


@pytest.fixture(scope="session")
def other_keypair(key_manager: KeyManager) -> KeyPair:
    """A second, unrelated key pair."""
    return key_manager.generate()


# ---------------------------------------------------------------------------
# Bundle fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def bundle_signer() -> BundleSigner:
    return BundleSigner()


@pytest.fixture()
def bundle_verifier() -> BundleVerifier:
    return BundleVerifier()


@pytest.fixture()
def hello_bundle(bundle_signer: BundleSigner, keypair: KeyPair) -> bytes:
    """The 5-byte plaintext ``hello`` signed at level 3."""
    return bundle_signer.sign(b"hello", keypair.secret_seed, 3)


# ---------------------------------------------------------------------------
# On-disk fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def saved_keys(
    tmp_path: Path, keypair: KeyPair, key_manager: KeyManager
) -> tuple[Path, Path]:
    """Write the session key pair to tmp_path; return (secret, public) Paths."""
    secret_path = key_manager.write_secret(tmp_path / "keys" / "id.key", keypair)
    public_path = key_manager.write_public(tmp_path / "keys" / "id.key.pub", keypair)
    return secret_path, public_path


@pytest.fixture()
def document(tmp_path: Path) -> Path:
    """A small, compressible text file."""
    path = tmp_path / "document.txt"
    path.write_bytes(b"The quick brown fox jumps over the lazy dog.\n" * 50)
    return path
