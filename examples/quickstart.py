"""aumai-binseal quickstart: working demonstrations of the main features.

Run this file directly to verify your installation:

    python examples/quickstart.py

Each demo function is self-contained and works in a temporary directory that
is removed afterwards.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from aumai_binseal import (
    BundleSigner,
    BundleVerifier,
    KeyManager,
    SignatureMismatch,
    inspect_bundle,
    sign_file,
    verify_file,
)


# ---------------------------------------------------------------------------
# Demo 1: key generation, signing, and verification on disk
# ---------------------------------------------------------------------------

def demo_sign_and_verify_files() -> None:
    """Generate keys, sign a file into a bundle, and recover it."""

    print("\n=== Demo 1: Sign & Verify Files ===")

    with tempfile.TemporaryDirectory() as tmpdir:
        tmp = Path(tmpdir)

        document = tmp / "report.txt"
        document.write_text("quarterly numbers\n" * 200, encoding="utf-8")

        secret_path, public_path = KeyManager().generate_key_files(tmp / "demo.key")
        print(f"  Secret key: {secret_path}")
        print(f"  Public key: {public_path}")

        bundle_path = sign_file(document, secret_path, compression_level=19)
        print(f"  Bundle written to: {bundle_path}")

        bundle = inspect_bundle(bundle_path)
        print(f"  Original {document.stat().st_size:,} bytes, "
              f"payload {len(bundle.payload):,} bytes at level "
              f"{bundle.compression_level}")

        recovered_path = verify_file(bundle_path, public_path)
        assert recovered_path.read_bytes() == document.read_bytes()
        print(f"  Recovered file: {recovered_path}")

        print("  Demo 1 passed.")


# ---------------------------------------------------------------------------
# Demo 2: in-memory bundles and wrong-key rejection
# ---------------------------------------------------------------------------

def demo_wrong_key_rejected() -> None:
    """Show that a bundle does not verify under an unrelated public key."""

    print("\n=== Demo 2: Wrong Key Rejection ===")

    km = KeyManager()
    alice = km.generate()
    mallory = km.generate()

    bundle = BundleSigner().sign(b"hello", alice.secret_seed, 3)
    print(f"  Bundle size: {len(bundle)} bytes")

    plaintext = BundleVerifier().verify(bundle, alice.public_key)
    print(f"  Verified with signer key: {plaintext!r}")

    try:
        BundleVerifier().verify(bundle, mallory.public_key)
    except SignatureMismatch as exc:
        print(f"  Rejected with unrelated key: {exc}")
    else:
        raise AssertionError("verification should have failed")

    print("  Demo 2 passed.")


if __name__ == "__main__":
    demo_sign_and_verify_files()
    demo_wrong_key_rejected()
    print("\nAll demos completed successfully.")
