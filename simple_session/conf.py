"""
Simple Session locations and constants, read from environment variables.

Per-session settings (SESSION_SECURE, SESSION_HTTPONLY, SESSION_SAMESITE,
SESSION_TIMEOUT) are read and validated by
:meth:`simple_session.config.SessionConfig.from_env`.
"""
import os
import tempfile

_BASE_DIR = os.path.join(tempfile.gettempdir(), "simple_session")

SESSION_NAME = os.environ.get("SESSION_NAME", "simple_session")

# Directory holding the daily encryption key files.
SESSION_KEY_DIR = os.environ.get(
    "SESSION_KEY_DIR", os.path.join(_BASE_DIR, "encrypt_key")
)
# Directory used by the file session backend.
SESSION_STORAGE_DIR = os.environ.get(
    "SESSION_STORAGE_DIR", os.path.join(_BASE_DIR, "sessions")
)
SESSION_CIPHER_BACKEND = os.environ.get("SESSION_CIPHER_BACKEND", "aesgcm")

FLASH_SESSION_NAME = "session_flash_data"
# Reserved store key, kept unencrypted.
LAST_ACCESS_KEY = "last_access_time"
