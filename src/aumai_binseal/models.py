"""Pydantic models for aumai-binseal."""

from __future__ import annotations

import struct
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from aumai_binseal.signing import KEY_SIZE, SIGNATURE_SIZE, derive_public_key

BUNDLE_MAGIC = b"BINSEAL\x00"
BUNDLE_HEADER_FORMAT = f">{len(BUNDLE_MAGIC)}sHB{SIGNATURE_SIZE}sQ"
BUNDLE_HEADER_SIZE = struct.calcsize(BUNDLE_HEADER_FORMAT)


class KeyKind(int, Enum):
    """Tag byte stored at the start of every key file."""

    secret = 0x01
    public = 0x02


class KeyFragment(BaseModel):
    """One half of a key pair, as read back from a single key file."""

    model_config = ConfigDict(frozen=True)

    kind: KeyKind
    material: bytes = Field(min_length=KEY_SIZE, max_length=KEY_SIZE)


class KeyPair(BaseModel):
    """An Ed25519 secret seed together with its derived public key.

    The seed is the only secret; the public key is always recomputed from it
    and the validator rejects any pair where the two disagree.
    """

    model_config = ConfigDict(frozen=True)

    secret_seed: bytes = Field(min_length=KEY_SIZE, max_length=KEY_SIZE)
    public_key: bytes = Field(min_length=KEY_SIZE, max_length=KEY_SIZE)

    @model_validator(mode="after")
    def _public_key_matches_seed(self) -> KeyPair:
        if derive_public_key(self.secret_seed) != self.public_key:
            raise ValueError("public_key is not derived from secret_seed")
        return self

    @classmethod
    def from_seed(cls, secret_seed: bytes) -> KeyPair:
        return cls(secret_seed=secret_seed, public_key=derive_public_key(secret_seed))

    def fragment(self, kind: KeyKind) -> KeyFragment:
        """Return the part of the pair that is persisted under *kind*."""
        material = self.secret_seed if kind == KeyKind.secret else self.public_key
        return KeyFragment(kind=kind, material=material)


class Bundle(BaseModel):
    """Decoded contents of a signed bundle file."""

    model_config = ConfigDict(frozen=True)

    format_version: int = Field(ge=0, le=0xFFFF)
    compression_level: int = Field(ge=0, le=0xFF)
    signature: bytes = Field(min_length=SIGNATURE_SIZE, max_length=SIGNATURE_SIZE)
    payload: bytes = b""

    @property
    def header_size(self) -> int:
        return BUNDLE_HEADER_SIZE

    @property
    def payload_length(self) -> int:
        return len(self.payload)


__all__ = [
    "BUNDLE_HEADER_FORMAT",
    "BUNDLE_HEADER_SIZE",
    "BUNDLE_MAGIC",
    "Bundle",
    "KeyFragment",
    "KeyKind",
    "KeyPair",
]
