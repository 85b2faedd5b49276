"""Tests for aumai_binseal.keys: RandomSource and KeyManager."""

from __future__ import annotations

import itertools
import os
import stat
from pathlib import Path

import pytest

from aumai_binseal.errors import EntropyUnavailable, KeyFormatError, WrongKeyKind
from aumai_binseal.keys import KEY_FILE_SIZE, KeyManager, RandomSource
from aumai_binseal.models import KeyKind, KeyPair
from aumai_binseal.signing import derive_public_key

# ===========================================================================
# RandomSource
# ===========================================================================


def _broken_reader(size: int) -> bytes:
    raise OSError("no entropy today")


class TestRandomSource:
    def test_read_returns_requested_size(self) -> None:
        assert len(RandomSource().read(32)) == 32

    def test_reads_are_not_repeated(self) -> None:
        source = RandomSource()
        assert source.read(32) != source.read(32)

    def test_iteration_is_unbounded(self) -> None:
        values = list(itertools.islice(RandomSource(), 200))
        assert len(values) == 200
        assert all(0 <= v <= 255 for v in values)

    def test_unreadable_source_raises(self) -> None:
        with pytest.raises(EntropyUnavailable, match="no entropy today"):
            RandomSource(_broken_reader).read(32)

    def test_short_read_raises(self) -> None:
        with pytest.raises(EntropyUnavailable):
            RandomSource(lambda size: b"\x00" * (size - 1)).read(32)


# ===========================================================================
# KeyManager.generate
# ===========================================================================


class TestKeyManagerGenerate:
    def test_public_key_derived_from_seed(self, key_manager: KeyManager) -> None:
        pair = key_manager.generate()
        assert pair.public_key == derive_public_key(pair.secret_seed)

    def test_each_call_generates_distinct_key(self, key_manager: KeyManager) -> None:
        assert key_manager.generate().secret_seed != key_manager.generate().secret_seed

    def test_seed_comes_from_random_source(self) -> None:
        seed = bytes(range(32))
        km = KeyManager(RandomSource(lambda size: seed[:size]))
        assert km.generate() == KeyPair.from_seed(seed)

    def test_entropy_failure_propagates(self) -> None:
        km = KeyManager(RandomSource(_broken_reader))
        with pytest.raises(EntropyUnavailable):
            km.generate()


# ===========================================================================
# KeyManager persistence
# ===========================================================================


class TestKeyManagerPersistence:
    def test_secret_file_layout(
        self, saved_keys: tuple[Path, Path], keypair: KeyPair
    ) -> None:
        secret_path, _ = saved_keys
        raw = secret_path.read_bytes()
        assert len(raw) == KEY_FILE_SIZE
        assert raw[0] == 0x01
        assert raw[1:] == keypair.secret_seed

    def test_public_file_layout(
        self, saved_keys: tuple[Path, Path], keypair: KeyPair
    ) -> None:
        _, public_path = saved_keys
        raw = public_path.read_bytes()
        assert raw[0] == 0x02
        assert raw[1:] == keypair.public_key

    def test_read_secret_fragment(
        self, saved_keys: tuple[Path, Path], keypair: KeyPair, key_manager: KeyManager
    ) -> None:
        secret_path, _ = saved_keys
        fragment = key_manager.read(secret_path)
        assert fragment.kind == KeyKind.secret
        assert fragment.material == keypair.secret_seed

    def test_read_public_fragment(
        self, saved_keys: tuple[Path, Path], keypair: KeyPair, key_manager: KeyManager
    ) -> None:
        _, public_path = saved_keys
        fragment = key_manager.read(public_path)
        assert fragment.kind == KeyKind.public
        assert fragment.material == keypair.public_key

    def test_write_overwrites_existing_file(
        self, tmp_path: Path, key_manager: KeyManager
    ) -> None:
        path = tmp_path / "id.pub"
        path.write_bytes(b"old contents")
        pair = key_manager.generate()
        key_manager.write_public(path, pair)
        assert key_manager.load_public_key(path) == pair.public_key

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permissions only")
    def test_secret_file_is_owner_only(self, saved_keys: tuple[Path, Path]) -> None:
        secret_path, _ = saved_keys
        assert stat.S_IMODE(secret_path.stat().st_mode) == 0o600

    def test_unknown_tag_raises(self, tmp_path: Path, key_manager: KeyManager) -> None:
        path = tmp_path / "bad.key"
        path.write_bytes(b"\x03" + b"\x00" * 32)
        with pytest.raises(KeyFormatError, match="unknown key tag 0x03"):
            key_manager.read(path)

    def test_short_file_raises(self, tmp_path: Path, key_manager: KeyManager) -> None:
        path = tmp_path / "short.key"
        path.write_bytes(b"\x01" + b"\x00" * 31)
        with pytest.raises(KeyFormatError, match="33 bytes"):
            key_manager.read(path)

    def test_empty_file_raises(self, tmp_path: Path, key_manager: KeyManager) -> None:
        path = tmp_path / "empty.key"
        path.write_bytes(b"")
        with pytest.raises(KeyFormatError):
            key_manager.read(path)

    def test_missing_file_raises(self, key_manager: KeyManager) -> None:
        with pytest.raises(FileNotFoundError):
            key_manager.read("/nonexistent/path/id.key")


class TestKeyManagerKindEnforcement:
    def test_load_secret_key(
        self, saved_keys: tuple[Path, Path], keypair: KeyPair, key_manager: KeyManager
    ) -> None:
        secret_path, _ = saved_keys
        assert key_manager.load_secret_key(secret_path) == keypair.secret_seed

    def test_load_public_key(
        self, saved_keys: tuple[Path, Path], keypair: KeyPair, key_manager: KeyManager
    ) -> None:
        _, public_path = saved_keys
        assert key_manager.load_public_key(public_path) == keypair.public_key

    def test_public_file_as_secret_raises(
        self, saved_keys: tuple[Path, Path], key_manager: KeyManager
    ) -> None:
        _, public_path = saved_keys
        with pytest.raises(WrongKeyKind, match="holds a public key"):
            key_manager.load_secret_key(public_path)

    def test_secret_file_as_public_raises(
        self, saved_keys: tuple[Path, Path], key_manager: KeyManager
    ) -> None:
        secret_path, _ = saved_keys
        with pytest.raises(WrongKeyKind, match="holds a secret key"):
            key_manager.load_public_key(secret_path)


class TestGenerateKeyFiles:
    def test_default_public_path(self, tmp_path: Path, key_manager: KeyManager) -> None:
        secret_path, public_path = key_manager.generate_key_files(tmp_path / "id")
        assert secret_path == tmp_path / "id"
        assert public_path == tmp_path / "id.pub"

    def test_explicit_public_path(
        self, tmp_path: Path, key_manager: KeyManager
    ) -> None:
        _, public_path = key_manager.generate_key_files(
            tmp_path / "a.key", tmp_path / "b.key"
        )
        assert public_path == tmp_path / "b.key"
        assert public_path.exists()

    def test_files_form_a_pair(self, tmp_path: Path, key_manager: KeyManager) -> None:
        secret_path, public_path = key_manager.generate_key_files(tmp_path / "id")
        seed = key_manager.load_secret_key(secret_path)
        assert key_manager.load_public_key(public_path) == derive_public_key(seed)

    def test_creates_parent_directory(
        self, tmp_path: Path, key_manager: KeyManager
    ) -> None:
        secret_path, _ = key_manager.generate_key_files(tmp_path / "deep" / "id")
        assert secret_path.exists()

    def test_failed_public_write_removes_secret(
        self, tmp_path: Path, key_manager: KeyManager
    ) -> None:
        public_dir = tmp_path / "taken"
        public_dir.mkdir()
        with pytest.raises(OSError):
            key_manager.generate_key_files(tmp_path / "id", public_dir)
        assert not (tmp_path / "id").exists()
        assert [p.name for p in tmp_path.iterdir()] == ["taken"]
