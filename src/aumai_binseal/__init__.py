"""aumai-binseal: Sign a file and bundle the signature with its compressed contents."""

from aumai_binseal.codec import BundleCodec
from aumai_binseal.core import (
    BundleSigner,
    BundleVerifier,
    Compressor,
    Hasher,
    inspect_bundle,
    sign_file,
    verify_file,
)
from aumai_binseal.errors import (
    BadMagic,
    BinsealError,
    BundleError,
    CorruptPayload,
    EntropyUnavailable,
    InvalidCompressionLevel,
    InvalidKey,
    KeyFormatError,
    SignatureMismatch,
    TrailingData,
    TruncatedBundle,
    UnsupportedVersion,
    WrongKeyKind,
)
from aumai_binseal.keys import KeyManager, RandomSource
from aumai_binseal.models import Bundle, KeyFragment, KeyKind, KeyPair
from aumai_binseal.signing import Signer, Verifier

__version__ = "0.1.0"

__all__ = [
    "BadMagic",
    "BinsealError",
    "Bundle",
    "BundleCodec",
    "BundleError",
    "BundleSigner",
    "BundleVerifier",
    "Compressor",
    "CorruptPayload",
    "EntropyUnavailable",
    "Hasher",
    "InvalidCompressionLevel",
    "InvalidKey",
    "KeyFormatError",
    "KeyFragment",
    "KeyKind",
    "KeyManager",
    "KeyPair",
    "RandomSource",
    "SignatureMismatch",
    "Signer",
    "TrailingData",
    "TruncatedBundle",
    "UnsupportedVersion",
    "Verifier",
    "WrongKeyKind",
    "inspect_bundle",
    "sign_file",
    "verify_file",
]
