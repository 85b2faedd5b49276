"""Ed25519 signing and verification over content digests."""

from __future__ import annotations

import logging

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from aumai_binseal.errors import InvalidKey

logger = logging.getLogger(__name__)

KEY_SIZE = 32
SIGNATURE_SIZE = 64


def _load_private_key(secret_seed: bytes) -> Ed25519PrivateKey:
    if len(secret_seed) != KEY_SIZE:
        raise InvalidKey(
            f"secret key must be {KEY_SIZE} bytes, got {len(secret_seed)}"
        )
    try:
        return Ed25519PrivateKey.from_private_bytes(secret_seed)
    except ValueError as exc:
        raise InvalidKey(f"malformed secret key: {exc}") from exc


def _load_public_key(public_key: bytes) -> Ed25519PublicKey:
    if len(public_key) != KEY_SIZE:
        raise InvalidKey(
            f"public key must be {KEY_SIZE} bytes, got {len(public_key)}"
        )
    try:
        return Ed25519PublicKey.from_public_bytes(public_key)
    except ValueError as exc:
        raise InvalidKey(f"malformed public key: {exc}") from exc


def derive_public_key(secret_seed: bytes) -> bytes:
    """Return the raw 32-byte Ed25519 public key for *secret_seed*."""
    return (
        _load_private_key(secret_seed)
        .public_key()
        .public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
    )


class Signer:
    """Sign content digests with a raw Ed25519 secret seed."""

    def sign(self, secret_seed: bytes, digest: bytes) -> bytes:
        """Return the 64-byte Ed25519 signature of *digest*.

        Raises:
            InvalidKey: if *secret_seed* is not a 32-byte Ed25519 seed.
        """
        private_key = _load_private_key(secret_seed)
        signature = private_key.sign(digest)
        logger.debug("Signed %d-byte digest", len(digest))
        return signature


class Verifier:
    """Check Ed25519 signatures over content digests."""

    def verify(self, public_key: bytes, digest: bytes, signature: bytes) -> bool:
        """Return whether *signature* is valid for *digest* under *public_key*.

        Any mismatch of key, digest or signature gives ``False`` with no hint
        about which one was wrong.  Only a structurally malformed public key
        raises.

        Raises:
            InvalidKey: if *public_key* is not 32 bytes.
        """
        key = _load_public_key(public_key)
        if len(signature) != SIGNATURE_SIZE:
            return False
        try:
            key.verify(signature, digest)
        except InvalidSignature:
            return False
        return True


__all__ = [
    "KEY_SIZE",
    "SIGNATURE_SIZE",
    "Signer",
    "Verifier",
    "derive_public_key",
]
