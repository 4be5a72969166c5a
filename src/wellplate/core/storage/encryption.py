"""Fernet-based field encryption for food log text at rest.

Free-text fields of a food log entry (food name, serving size) are
encrypted before they reach SQLite. Numeric macros stay in plaintext so the
daily nutrition sum can run as a plain SQL query.
"""

from __future__ import annotations

import logging

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)


class EncryptionError(Exception):
    """Raised when encryption/decryption fails."""


class FieldEncryptor:
    """Encrypts and decrypts text fields using Fernet symmetric encryption.

    Usage::

        encryptor = FieldEncryptor(key="...")
        token = encryptor.encrypt("Greek yogurt")
        encryptor.decrypt(token)  # "Greek yogurt"
    """

    def __init__(self, key: str) -> None:
        """Initialize with a Fernet key.

        Args:
            key: A valid Fernet key string. Generate with
                 ``FieldEncryptor.generate_key()``.

        Raises:
            EncryptionError: If the key is empty or invalid.
        """
        if not key or not key.strip():
            raise EncryptionError("Encryption key must not be empty")
        try:
            self._fernet = Fernet(key.encode())
        except ValueError as exc:
            raise EncryptionError(f"Invalid encryption key: {exc}") from exc

    def encrypt(self, text: str | None) -> str | None:
        """Encrypt a text value; ``None`` passes through unchanged."""
        if text is None:
            return None
        return self._fernet.encrypt(text.encode("utf-8")).decode("utf-8")

    def decrypt(self, token: str | None) -> str | None:
        """Decrypt a Fernet token back to text; empty/``None`` gives ``None``.

        Raises:
            EncryptionError: If the token is invalid or was made with another key.
        """
        if not token:
            return None
        try:
            return self._fernet.decrypt(token.encode("utf-8")).decode("utf-8")
        except InvalidToken as exc:
            raise EncryptionError("Decryption failed: invalid token or wrong key") from exc

    @staticmethod
    def generate_key() -> str:
        """Generate a new URL-safe base64-encoded Fernet key."""
        return Fernet.generate_key().decode("utf-8")
