"""
Session Crypto — Envelope encryption of session values.

Each value is serialized, encrypted under the daily session key with a fresh
random 96-bit nonce, and packaged as text::

    base64( nonce 12B | encrypted_payload + tag 16B )

Decryption is the exact inverse. The AEAD tag makes every wrong-key,
rotated-key or corrupted blob fail loudly instead of yielding garbage.

Security Note:
    Never log plaintext, ciphertext or key material.
"""
import os
import base64
import binascii
import logging
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM, ChaCha20Poly1305

from .conf import SESSION_CIPHER_BACKEND
from .exceptions import DecryptionFailure
from .serialization import serialize_value, deserialize_value

logger = logging.getLogger("simple_session.crypto")

NONCE_SIZE = 12  # 96-bit nonce
TAG_SIZE = 16
KEY_LENGTH = 32  # AES-256


def _get_cipher_cls(backend: str) -> type:
    """Return the AEAD cipher class for a backend name."""
    if backend.lower() == "chacha20":
        return ChaCha20Poly1305
    return AESGCM


# Resolve cipher once at module load to prevent encrypt/decrypt mismatch
# if the env var changes mid-process.
CIPHER_CLS = _get_cipher_cls(SESSION_CIPHER_BACKEND)


def encrypt(plaintext: bytes, key: bytes) -> str:
    """Encrypt plaintext under key with a random nonce.

    Args:
        plaintext: Data to encrypt.
        key: Raw 32-byte key.

    Returns:
        ASCII text blob: base64 of nonce followed by ciphertext.
    """
    cipher = CIPHER_CLS(key)
    nonce = os.urandom(NONCE_SIZE)
    ct = cipher.encrypt(nonce, plaintext, None)
    return base64.b64encode(nonce + ct).decode("ascii")


def decrypt(blob: str, key: bytes) -> bytes:
    """Decrypt a text blob produced by :func:`encrypt`.

    Args:
        blob: base64 text of [nonce 12B][payload+tag].
        key: Raw 32-byte key.

    Returns:
        Decrypted plaintext bytes.

    Raises:
        DecryptionFailure: Malformed blob, wrong key or tampered ciphertext.
    """
    if not isinstance(blob, (str, bytes)):
        raise DecryptionFailure(
            f"Encrypted value must be text, got {type(blob).__name__}"
        )
    try:
        raw = base64.b64decode(blob, validate=True)
    except (binascii.Error, ValueError) as err:
        raise DecryptionFailure(f"Encrypted value is not valid base64: {err}") from err
    _min = NONCE_SIZE + TAG_SIZE
    if len(raw) < _min:
        raise DecryptionFailure(
            f"Encrypted value too short: {len(raw)} bytes (minimum {_min})"
        )
    cipher = CIPHER_CLS(key)
    try:
        return cipher.decrypt(raw[:NONCE_SIZE], raw[NONCE_SIZE:], None)
    except InvalidTag as err:
        raise DecryptionFailure(
            "Encrypted value cannot be authenticated with the current key"
        ) from err


def encrypt_value(value: Any, key: bytes) -> str:
    """Serialize and encrypt an arbitrary Python value."""
    return encrypt(serialize_value(value), key)


def decrypt_value(blob: str, key: bytes) -> Any:
    """Decrypt and restore a value stored by :func:`encrypt_value`.

    Raises:
        DecryptionFailure: If decryption or deserialization fails.
    """
    plaintext = decrypt(blob, key)
    try:
        return deserialize_value(plaintext)
    except ValueError as err:
        raise DecryptionFailure(str(err)) from err
