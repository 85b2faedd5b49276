"""Sign-and-bundle and verify-and-unbundle logic."""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

import zstandard

from aumai_binseal.codec import FORMAT_VERSION, BundleCodec
from aumai_binseal.errors import (
    CorruptPayload,
    InvalidCompressionLevel,
    SignatureMismatch,
)
from aumai_binseal.fileio import write_atomic
from aumai_binseal.keys import KeyManager
from aumai_binseal.models import Bundle
from aumai_binseal.signing import Signer, Verifier

logger = logging.getLogger(__name__)

DIGEST_SIZE = 32
MIN_COMPRESSION_LEVEL = 1
MAX_COMPRESSION_LEVEL = 22
DEFAULT_COMPRESSION_LEVEL = MAX_COMPRESSION_LEVEL

SIGNED_SUFFIX = ".sig"
VERIFIED_SUFFIX = ".ver"


# ---------------------------------------------------------------------------
# Hasher
# ---------------------------------------------------------------------------


class Hasher:
    """Incremental 32-byte BLAKE2b digest of the uncompressed content."""

    def __init__(self, data: bytes = b"") -> None:
        self._hash = hashlib.blake2b(digest_size=DIGEST_SIZE)
        if data:
            self._hash.update(data)

    def update(self, data: bytes) -> None:
        self._hash.update(data)

    def digest(self) -> bytes:
        return self._hash.digest()


def content_digest(data: bytes) -> bytes:
    """Return the 32-byte digest of *data*."""
    return Hasher(data).digest()


# ---------------------------------------------------------------------------
# Compressor
# ---------------------------------------------------------------------------


def check_compression_level(level: int) -> int:
    """Return *level* unchanged if it lies in the supported zstd range.

    Raises:
        InvalidCompressionLevel: if *level* is outside 1..22.
    """
    if not MIN_COMPRESSION_LEVEL <= level <= MAX_COMPRESSION_LEVEL:
        raise InvalidCompressionLevel(
            f"compression level must be between {MIN_COMPRESSION_LEVEL} and "
            f"{MAX_COMPRESSION_LEVEL}, got {level}"
        )
    return level


class Compressor:
    """Zstandard compression of bundle payloads.

    Frames carry their content size and a checksum, so decompression needs no
    parameters from the bundle header.
    """

    def compress(self, data: bytes, level: int) -> bytes:
        check_compression_level(level)
        cctx = zstandard.ZstdCompressor(
            level=level, write_checksum=True, write_content_size=True
        )
        return cctx.compress(data)

    def decompress(self, data: bytes) -> bytes:
        """Reconstruct the original bytes of a zstd frame.

        The frame is decoded incrementally so that a damaged content size in
        the frame header cannot drive the size of the output buffer.

        Raises:
            CorruptPayload: if the frame is truncated or invalid, or the
                payload is not a single zstd data frame.
        """
        if not data.startswith(zstandard.FRAME_HEADER):
            raise CorruptPayload("payload does not start with a zstd data frame")
        dobj = zstandard.ZstdDecompressor().decompressobj()
        try:
            plaintext = dobj.decompress(data)
        except zstandard.ZstdError as exc:
            raise CorruptPayload(f"cannot decompress payload: {exc}") from exc
        if not dobj.eof:
            raise CorruptPayload("payload ends before the end of the zstd frame")
        if dobj.unused_data:
            raise CorruptPayload(
                f"{len(dobj.unused_data)} unexpected bytes after the zstd frame"
            )
        return plaintext


# ---------------------------------------------------------------------------
# BundleSigner
# ---------------------------------------------------------------------------


class BundleSigner:
    """Hash, sign and compress content into a bundle."""

    def __init__(self) -> None:
        self._signer = Signer()
        self._compressor = Compressor()
        self._codec = BundleCodec()

    def sign(
        self,
        plaintext: bytes,
        secret_key: bytes,
        compression_level: int = DEFAULT_COMPRESSION_LEVEL,
    ) -> bytes:
        """Return the encoded bundle for *plaintext* signed with *secret_key*.

        The signature covers the digest of the uncompressed plaintext.  The
        compression level is checked before any cryptographic work is done.
        """
        check_compression_level(compression_level)
        logger.info("Original size (in bytes): %d", len(plaintext))

        logger.info("Hashing...")
        digest = content_digest(plaintext)

        logger.info("Signing digest...")
        signature = self._signer.sign(secret_key, digest)

        logger.info("Compressing at level %d...", compression_level)
        payload = self._compressor.compress(plaintext, compression_level)
        logger.info("Compressed size (in bytes): %d", len(payload))

        bundle = Bundle(
            format_version=FORMAT_VERSION,
            compression_level=compression_level,
            signature=signature,
            payload=payload,
        )
        return self._codec.encode(bundle)


# ---------------------------------------------------------------------------
# BundleVerifier
# ---------------------------------------------------------------------------


class BundleVerifier:
    """Decode, decompress and authenticate a bundle."""

    def __init__(self) -> None:
        self._verifier = Verifier()
        self._compressor = Compressor()
        self._codec = BundleCodec()

    def verify(self, bundle_bytes: bytes, public_key: bytes) -> bytes:
        """Return the original plaintext stored in *bundle_bytes*.

        Nothing is returned unless the signature matches the digest of the
        decompressed content under *public_key*.

        Raises:
            BundleError: if the bundle or its payload is malformed.
            InvalidKey: if *public_key* is malformed.
            SignatureMismatch: if the signature does not verify.
        """
        logger.info("Decoding bundle...")
        bundle = self._codec.decode(bundle_bytes)
        logger.debug(
            "Bundle format version %d, compression level %d, payload %d bytes",
            bundle.format_version,
            bundle.compression_level,
            len(bundle.payload),
        )

        logger.info("Decompressing...")
        plaintext = self._compressor.decompress(bundle.payload)

        logger.info("Hashing...")
        digest = content_digest(plaintext)

        logger.info("Verifying...")
        if not self._verifier.verify(public_key, digest, bundle.signature):
            raise SignatureMismatch(
                "signature does not match the bundle content and public key"
            )
        return plaintext


# ---------------------------------------------------------------------------
# File-level operations
# ---------------------------------------------------------------------------


def sign_file(
    file_path: str | Path,
    key_path: str | Path,
    output_path: str | Path | None = None,
    compression_level: int = DEFAULT_COMPRESSION_LEVEL,
) -> Path:
    """Sign *file_path* with the secret key at *key_path* and write the bundle.

    The bundle goes to *output_path*, or ``<file_path>.sig`` when omitted.

    Returns:
        The path the bundle was written to.
    """
    check_compression_level(compression_level)
    target = Path(output_path) if output_path else Path(f"{file_path}{SIGNED_SUFFIX}")

    logger.info("Reading signing key...")
    secret_key = KeyManager().load_secret_key(key_path)
    logger.info("Reading file...")
    plaintext = Path(file_path).read_bytes()

    bundle_bytes = BundleSigner().sign(plaintext, secret_key, compression_level)

    logger.info("Writing bundle to %s...", target)
    return write_atomic(target, bundle_bytes)


def verify_file(
    file_path: str | Path,
    key_path: str | Path,
    output_path: str | Path | None = None,
) -> Path:
    """Verify the bundle at *file_path* and write the recovered content.

    The content goes to *output_path*, or ``<file_path>.ver`` when omitted.
    Nothing is written if verification fails.

    Returns:
        The path the recovered file was written to.
    """
    target = (
        Path(output_path) if output_path else Path(f"{file_path}{VERIFIED_SUFFIX}")
    )

    logger.info("Reading verifying key...")
    public_key = KeyManager().load_public_key(key_path)
    logger.info("Reading bundle...")
    bundle_bytes = Path(file_path).read_bytes()

    plaintext = BundleVerifier().verify(bundle_bytes, public_key)

    logger.info("Writing decoded file to %s...", target)
    return write_atomic(target, plaintext)


def inspect_bundle(file_path: str | Path) -> Bundle:
    """Decode the bundle at *file_path* without checking its signature."""
    return BundleCodec().decode(Path(file_path).read_bytes())


__all__ = [
    "DEFAULT_COMPRESSION_LEVEL",
    "DIGEST_SIZE",
    "MAX_COMPRESSION_LEVEL",
    "MIN_COMPRESSION_LEVEL",
    "BundleSigner",
    "BundleVerifier",
    "Compressor",
    "Hasher",
    "check_compression_level",
    "content_digest",
    "inspect_bundle",
    "sign_file",
    "verify_file",
]
