"""Binary layout of signed bundle files.

A bundle is a fixed 83-byte header followed by the compressed payload::

    magic             8 bytes   b"BINSEAL\\x00"
    format_version    uint16
    compression_level uint8
    signature         64 bytes
    payload_length    uint64
    payload           payload_length bytes

All integers are big-endian.
"""

from __future__ import annotations

import struct

from aumai_binseal.errors import (
    BadMagic,
    TrailingData,
    TruncatedBundle,
    UnsupportedVersion,
)
from aumai_binseal.models import BUNDLE_HEADER_FORMAT, BUNDLE_MAGIC, Bundle

MAGIC = BUNDLE_MAGIC
FORMAT_VERSION = 1

_HEADER = struct.Struct(BUNDLE_HEADER_FORMAT)
HEADER_SIZE = _HEADER.size


class BundleCodec:
    """Serialise and parse :class:`Bundle` objects."""

    def encode(self, bundle: Bundle) -> bytes:
        header = _HEADER.pack(
            MAGIC,
            bundle.format_version,
            bundle.compression_level,
            bundle.signature,
            len(bundle.payload),
        )
        return header + bundle.payload

    def decode(self, data: bytes) -> Bundle:
        """Parse *data* into a :class:`Bundle`.

        Raises:
            BadMagic: if *data* does not start with the bundle magic.
            TruncatedBundle: if *data* ends before the header or the payload
                it announces.
            UnsupportedVersion: if the format version is unknown.
            TrailingData: if bytes follow the payload.
        """
        prefix = data[: len(MAGIC)]
        if prefix != MAGIC:
            if len(prefix) < len(MAGIC) and MAGIC.startswith(prefix):
                raise TruncatedBundle(
                    f"bundle is {len(data)} bytes, shorter than its magic"
                )
            raise BadMagic("input is not a signed bundle (magic mismatch)")
        if len(data) < HEADER_SIZE:
            raise TruncatedBundle(
                f"bundle header needs {HEADER_SIZE} bytes, got {len(data)}"
            )

        _, version, level, signature, payload_length = _HEADER.unpack_from(data)
        if version == 0 or version > FORMAT_VERSION:
            raise UnsupportedVersion(
                f"bundle format version {version} is not supported "
                f"(this build understands up to {FORMAT_VERSION})"
            )

        available = len(data) - HEADER_SIZE
        if available < payload_length:
            raise TruncatedBundle(
                f"bundle announces {payload_length} payload bytes, "
                f"only {available} present"
            )
        if available > payload_length:
            raise TrailingData(
                f"{available - payload_length} unexpected bytes after payload"
            )

        return Bundle(
            format_version=version,
            compression_level=level,
            signature=signature,
            payload=data[HEADER_SIZE:],
        )


__all__ = [
    "FORMAT_VERSION",
    "HEADER_SIZE",
    "MAGIC",
    "BundleCodec",
]
