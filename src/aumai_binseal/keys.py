"""Key generation and key file persistence."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from pathlib import Path

from aumai_binseal.errors import EntropyUnavailable, KeyFormatError, WrongKeyKind
from aumai_binseal.fileio import write_atomic
from aumai_binseal.models import KeyFragment, KeyKind, KeyPair
from aumai_binseal.signing import KEY_SIZE

logger = logging.getLogger(__name__)

KEY_FILE_SIZE = 1 + KEY_SIZE
PUBLIC_KEY_SUFFIX = ".pub"


# ---------------------------------------------------------------------------
# RandomSource
# ---------------------------------------------------------------------------


class RandomSource:
    """Cryptographically secure bytes drawn from the operating system.

    *reader* defaults to :func:`os.urandom`; it is only replaceable so that
    tests can simulate an unavailable entropy source.
    """

    def __init__(self, reader: Callable[[int], bytes] = os.urandom) -> None:
        self._reader = reader

    def read(self, size: int) -> bytes:
        """Return exactly *size* fresh random bytes.

        Raises:
            EntropyUnavailable: if the OS entropy source cannot be read.
        """
        try:
            data = self._reader(size)
        except (OSError, NotImplementedError) as exc:
            raise EntropyUnavailable(f"cannot read OS entropy source: {exc}") from exc
        if len(data) != size:
            raise EntropyUnavailable(
                f"entropy source returned {len(data)} bytes, expected {size}"
            )
        return data

    def __iter__(self) -> Iterator[int]:
        while True:
            yield from self.read(64)


# ---------------------------------------------------------------------------
# KeyManager
# ---------------------------------------------------------------------------


class KeyManager:
    """Generate, persist, and load Ed25519 key pairs.

    A key file is one tag byte (``0x01`` secret, ``0x02`` public) followed by
    the 32 bytes of key material.
    """

    def __init__(self, random_source: RandomSource | None = None) -> None:
        self._random = random_source if random_source is not None else RandomSource()

    def generate(self) -> KeyPair:
        """Draw a fresh 32-byte seed and derive its public key."""
        return KeyPair.from_seed(self._random.read(KEY_SIZE))

    def write_secret(self, path: str | Path, keypair: KeyPair) -> Path:
        """Write the secret seed to *path*, readable by the owner only on POSIX."""
        return self._write(path, keypair.fragment(KeyKind.secret), mode=0o600)

    def write_public(self, path: str | Path, keypair: KeyPair) -> Path:
        return self._write(path, keypair.fragment(KeyKind.public))

    def read(self, path: str | Path) -> KeyFragment:
        """Read a key file and return whichever half of the pair it holds.

        Raises:
            KeyFormatError: if the tag is unknown or the length is wrong.
        """
        raw = Path(path).read_bytes()
        if len(raw) != KEY_FILE_SIZE:
            raise KeyFormatError(
                f"{path}: key file must be {KEY_FILE_SIZE} bytes, got {len(raw)}"
            )
        try:
            kind = KeyKind(raw[0])
        except ValueError:
            raise KeyFormatError(f"{path}: unknown key tag 0x{raw[0]:02x}") from None
        return KeyFragment(kind=kind, material=raw[1:])

    def load_secret_key(self, path: str | Path) -> bytes:
        """Return the secret seed stored at *path*.

        Raises:
            WrongKeyKind: if *path* holds a public key.
        """
        return self._require(path, KeyKind.secret)

    def load_public_key(self, path: str | Path) -> bytes:
        """Return the public key stored at *path*.

        Raises:
            WrongKeyKind: if *path* holds a secret key.
        """
        return self._require(path, KeyKind.public)

    def generate_key_files(
        self, secret_path: str | Path, public_path: str | Path | None = None
    ) -> tuple[Path, Path]:
        """Generate a key pair and write both halves to disk.

        The public key defaults to *secret_path* with ``.pub`` appended.  If
        the public key cannot be written the secret key file is removed again.

        Returns:
            A tuple of ``(secret_path, public_path)``.
        """
        if public_path is None:
            public_path = f"{secret_path}{PUBLIC_KEY_SUFFIX}"
        keypair = self.generate()
        written_secret = self.write_secret(secret_path, keypair)
        try:
            written_public = self.write_public(public_path, keypair)
        except BaseException:
            written_secret.unlink(missing_ok=True)
            raise
        logger.info("Key pair written to %s and %s", written_secret, written_public)
        return written_secret, written_public

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require(self, path: str | Path, kind: KeyKind) -> bytes:
        fragment = self.read(path)
        if fragment.kind != kind:
            raise WrongKeyKind(
                f"{path} holds a {fragment.kind.name} key, "
                f"but a {kind.name} key is required"
            )
        return fragment.material

    def _write(
        self, path: str | Path, fragment: KeyFragment, mode: int = 0o644
    ) -> Path:
        data = bytes([fragment.kind.value]) + fragment.material
        return write_atomic(path, data, mode=mode)


__all__ = [
    "KEY_FILE_SIZE",
    "KeyManager",
    "RandomSource",
]
