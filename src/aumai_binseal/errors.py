"""Exception hierarchy for aumai-binseal.

Every error carries the process exit code the CLI should use when it is the
reason a command failed, so callers can tell "not a bundle" apart from
"bundle from a newer version" without parsing messages.
"""

from __future__ import annotations

IO_ERROR_EXIT_CODE = 60


class BinsealError(Exception):
    """Base class for all aumai-binseal failures."""

    exit_code: int = 1

    @property
    def kind(self) -> str:
        return type(self).__name__


# ---------------------------------------------------------------------------
# Key material
# ---------------------------------------------------------------------------


class KeyMaterialError(BinsealError):
    """Malformed or mismatched key material."""


class KeyFormatError(KeyMaterialError):
    """A key file has an unknown tag or the wrong length."""

    exit_code = 10


class WrongKeyKind(KeyMaterialError):
    """A secret key was supplied where a public key is required, or vice versa."""

    exit_code = 11


class InvalidKey(KeyMaterialError):
    """Raw key bytes cannot be turned into an Ed25519 key."""

    exit_code = 12


# ---------------------------------------------------------------------------
# Bundle structure
# ---------------------------------------------------------------------------


class BundleError(BinsealError):
    """The input is not a well-formed bundle."""


class BadMagic(BundleError):
    exit_code = 20


class UnsupportedVersion(BundleError):
    exit_code = 21


class TruncatedBundle(BundleError):
    exit_code = 22


class TrailingData(BundleError):
    exit_code = 23


class CorruptPayload(BundleError):
    """The compressed payload is truncated or structurally invalid."""

    exit_code = 24


# ---------------------------------------------------------------------------
# Everything else
# ---------------------------------------------------------------------------


class SignatureMismatch(BinsealError):
    """The signature does not match the recovered content and the supplied key."""

    exit_code = 30


class InvalidCompressionLevel(BinsealError):
    exit_code = 40


class EntropyUnavailable(BinsealError):
    """The operating system entropy source could not be read."""

    exit_code = 50


__all__ = [
    "IO_ERROR_EXIT_CODE",
    "BadMagic",
    "BinsealError",
    "BundleError",
    "CorruptPayload",
    "EntropyUnavailable",
    "InvalidCompressionLevel",
    "InvalidKey",
    "KeyFormatError",
    "KeyMaterialError",
    "SignatureMismatch",
    "TrailingData",
    "TruncatedBundle",
    "UnsupportedVersion",
    "WrongKeyKind",
]
