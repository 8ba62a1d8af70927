"""
Tests for the encrypted value envelope.

Tests cover:
- Serializable values surviving encrypt/decrypt
- Fresh nonce per value
- Failures on wrong key, corrupted or malformed blobs
"""
import base64
import secrets
from datetime import datetime

import pytest
from datamodel import BaseModel
from pydantic import BaseModel as PydanticModel

from simple_session import DecryptionFailure
from simple_session.crypto import (
    NONCE_SIZE,
    decrypt,
    decrypt_value,
    encrypt,
    encrypt_value,
)


class UserModel(BaseModel):
    """Serializable datamodel for testing."""
    username: str
    email: str
    age: int = 0


class Profile(PydanticModel):
    """Pydantic model for testing."""
    name: str
    age: int = 0
    tags: list[str] = []


@pytest.fixture
def key():
    return secrets.token_bytes(32)


class TestRoundTrip:

    @pytest.mark.parametrize("value", [
        "david",
        42,
        3.5,
        True,
        None,
        [1, 2, "three"],
        {"nested": {"a": [1, 2]}},
        b"\x00\x01raw",
    ])
    def test_values(self, key, value):
        assert decrypt_value(encrypt_value(value, key), key) == value

    def test_datetime(self, key):
        now = datetime(2024, 3, 1, 12, 30, 15)
        assert decrypt_value(encrypt_value(now, key), key) == now

    def test_datamodel(self, key):
        user = UserModel(username="bob", email="bob@example.com", age=25)
        restored = decrypt_value(encrypt_value(user, key), key)
        assert isinstance(restored, UserModel)
        assert restored.username == "bob"
        assert restored.age == 25

    def test_pydantic_model(self, key):
        profile = Profile(name="bob", age=3, tags=["admin"])
        restored = decrypt_value(encrypt_value(profile, key), key)
        assert isinstance(restored, Profile)
        assert restored == profile
        assert restored.model_dump() == {"name": "bob", "age": 3, "tags": ["admin"]}
        assert restored.model_fields_set == {"name", "age", "tags"}
        assert restored.model_copy(update={"age": 4}).age == 4


class TestEnvelope:

    def test_blob_is_text_with_nonce_prefix(self, key):
        blob = encrypt(b"payload", key)
        assert isinstance(blob, str)
        raw = base64.b64decode(blob)
        assert len(raw) > NONCE_SIZE + len(b"payload")

    def test_fresh_nonce_each_time(self, key):
        assert encrypt_value("same", key) != encrypt_value("same", key)


class TestFailures:

    def test_wrong_key(self, key):
        blob = encrypt_value("secret", key)
        with pytest.raises(DecryptionFailure):
            decrypt_value(blob, secrets.token_bytes(32))

    def test_corrupted_blob(self, key):
        raw = bytearray(base64.b64decode(encrypt_value("secret", key)))
        raw[-1] ^= 0xFF
        with pytest.raises(DecryptionFailure):
            decrypt(base64.b64encode(bytes(raw)).decode(), key)

    def test_not_base64(self, key):
        with pytest.raises(DecryptionFailure):
            decrypt("not base64 !!", key)

    def test_too_short(self, key):
        with pytest.raises(DecryptionFailure):
            decrypt(base64.b64encode(b"short").decode(), key)

    def test_not_text(self, key):
        with pytest.raises(DecryptionFailure):
            decrypt(1234, key)
