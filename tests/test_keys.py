"""
Tests for key providers.

Tests cover:
- Daily key file creation and reuse
- Key stability within a day and rotation across days
- Concurrent generation by several processes under the file lock
- Failures surfaced as KeyProviderError
"""
import multiprocessing
import secrets
from datetime import date
from concurrent.futures import ProcessPoolExecutor

import pytest

from simple_session import FileKeyProvider, KeyProviderError, StaticKeyProvider
from simple_session.crypto import decrypt_value, encrypt_value
from simple_session import DecryptionFailure


class FakeToday:
    def __init__(self, day: date):
        self.day = day

    def __call__(self) -> date:
        return self.day


def fetch_key_hex(directory: str) -> str:
    """Run in a worker process: today's key as seen by a fresh provider."""
    return FileKeyProvider(directory, today=FakeToday(date(2024, 3, 1))).get_key().hex()


def fetch_keys_concurrently(directory, workers: int = 8, calls: int = 16) -> set:
    ctx = multiprocessing.get_context("fork")
    with ProcessPoolExecutor(max_workers=workers, mp_context=ctx) as pool:
        return set(pool.map(fetch_key_hex, [str(directory)] * calls))


@pytest.fixture
def today():
    return FakeToday(date(2024, 3, 1))


@pytest.fixture
def provider(tmp_path, today):
    return FileKeyProvider(tmp_path, today=today)


class TestFileKeyProvider:

    def test_creates_dated_key_file(self, provider, tmp_path):
        key = provider.get_key()
        assert len(key) == 32
        path = tmp_path / "2024_03_01_encrypt_key.txt"
        assert path.exists()
        assert bytes.fromhex(path.read_text()) == key
        assert path.stat().st_mode & 0o777 == 0o600

    def test_same_day_same_key(self, tmp_path, today):
        first = FileKeyProvider(tmp_path, today=today).get_key()
        second = FileKeyProvider(tmp_path, today=today).get_key()
        assert first == second

    def test_interoperable_ciphertexts_same_day(self, tmp_path, today):
        blob = encrypt_value("david", FileKeyProvider(tmp_path, today=today).get_key())
        other = FileKeyProvider(tmp_path, today=today).get_key()
        assert decrypt_value(blob, other) == "david"

    def test_reuses_existing_file(self, tmp_path, today):
        key = secrets.token_bytes(32)
        (tmp_path / "2024_03_01_encrypt_key.txt").write_text(key.hex())
        assert FileKeyProvider(tmp_path, today=today).get_key() == key

    def test_day_boundary_rotates_key(self, provider, tmp_path, today):
        old_key = provider.get_key()
        blob = encrypt_value("david", old_key)

        today.day = date(2024, 3, 2)
        new_key = provider.get_key()

        assert new_key != old_key
        assert not (tmp_path / "2024_03_01_encrypt_key.txt").exists()
        assert (tmp_path / "2024_03_02_encrypt_key.txt").exists()
        with pytest.raises(DecryptionFailure):
            decrypt_value(blob, new_key)

    def test_unrelated_files_kept(self, provider, tmp_path):
        other = tmp_path / "notes.txt"
        other.write_text("keep")
        provider.get_key()
        assert other.exists()

    def test_io_error(self, tmp_path, today):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        provider = FileKeyProvider(blocker / "keys", today=today)
        with pytest.raises(KeyProviderError):
            provider.get_key()

    def test_malformed_key_file(self, tmp_path, today):
        (tmp_path / "2024_03_01_encrypt_key.txt").write_text("zz-not-hex")
        with pytest.raises(KeyProviderError):
            FileKeyProvider(tmp_path, today=today).get_key()

    def test_short_key_file(self, tmp_path, today):
        (tmp_path / "2024_03_01_encrypt_key.txt").write_text("abcd")
        with pytest.raises(KeyProviderError):
            FileKeyProvider(tmp_path, today=today).get_key()


class TestStaticKeyProvider:

    def test_generate(self):
        assert len(StaticKeyProvider.generate().get_key()) == 32

    def test_rejects_short_key(self):
        with pytest.raises(KeyProviderError):
            StaticKeyProvider(b"short")


class TestConcurrentGeneration:

    def test_processes_agree_on_one_key(self, tmp_path):
        keys = fetch_keys_concurrently(tmp_path)
        assert len(keys) == 1
        [key_hex] = keys
        assert (tmp_path / "2024_03_01_encrypt_key.txt").read_text() == key_hex
        assert len(list(tmp_path.glob("*_encrypt_key.txt"))) == 1

    def test_empty_key_file_filled_once(self, tmp_path):
        path = tmp_path / "2024_03_01_encrypt_key.txt"
        path.touch()
        keys = fetch_keys_concurrently(tmp_path)
        assert len(keys) == 1
        content = path.read_text()
        assert keys == {content}
        assert len(content) == 64

    def test_empty_key_file_filled_under_lock(self, tmp_path, today):
        path = tmp_path / "2024_03_01_encrypt_key.txt"
        path.touch()
        key = FileKeyProvider(tmp_path, today=today).get_key()
        assert path.read_text() == key.hex()
        assert FileKeyProvider(tmp_path, today=today).get_key() == key

    def test_loser_reads_winner_key(self, tmp_path, today, monkeypatch):
        winner = secrets.token_bytes(32)
        path = tmp_path / "2024_03_01_encrypt_key.txt"
        path.touch()
        provider = FileKeyProvider(tmp_path, today=today)
        # the winner fills the file between the unlocked read and the lock
        monkeypatch.setattr(provider, "_read", lambda p: path.write_text(winner.hex()) and None)
        assert provider.get_key() == winner
        assert path.read_text() == winner.hex()
