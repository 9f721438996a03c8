"""At-rest encryption of check-in answers.

Only the ``responses`` list of a mood entry goes through here; mood labels,
scores and dates stay queryable in clear text.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)


class EncryptionError(Exception):
    """Bad key, unserializable value, or a token that does not decrypt."""


class FieldEncryptor:
    """Fernet wrapper that stores JSON values as URL-safe token strings.

    Usage::

        encryptor = FieldEncryptor(settings.encryption_key)
        column = encryptor.encrypt([qa.to_dict() for qa in answers])
        answers = encryptor.decrypt(column)
    """

    def __init__(self, key: str) -> None:
        if not key or not key.strip():
            raise EncryptionError("Encryption key must not be empty")
        try:
            self._fernet = Fernet(key.strip().encode("ascii"))
        except (ValueError, UnicodeEncodeError) as exc:
            raise EncryptionError(f"Invalid encryption key: {exc}") from exc

    def encrypt(self, data: Any) -> str:
        """Token for ``data``; ``None`` maps to "" so the column can stay empty."""
        if data is None:
            return ""
        try:
            payload = json.dumps(data, separators=(",", ":"))
        except (TypeError, ValueError) as exc:
            raise EncryptionError(f"Encryption failed: {exc}") from exc
        return self._fernet.encrypt(payload.encode("utf-8")).decode("ascii")

    def decrypt(self, token: str) -> Any:
        """Inverse of ``encrypt``; "" and ``None`` give ``None``.

        Raises:
            EncryptionError: If the token is corrupt or belongs to another key.
        """
        if not token:
            return None
        try:
            payload = self._fernet.decrypt(token.encode("ascii"))
        except InvalidToken as exc:
            logger.error("Stored answers could not be decrypted with the configured key")
            raise EncryptionError("Decryption failed: invalid token or wrong key") from exc
        return json.loads(payload)

    @staticmethod
    def generate_key() -> str:
        return Fernet.generate_key().decode("ascii")
