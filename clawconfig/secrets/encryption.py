"""
Token encryption.

AES-256-GCM encryption for OAuth tokens stored by the control plane.

Format:
    iv:authTag:encrypted, each part lowercase hex, with a 16-byte IV and
    a 16-byte authentication tag. This is the format the control plane
    writes, so tokens encrypted there decrypt here and vice versa.

Usage:
    cipher = TokenCipher(settings.encryption_key.get_secret_value())
    blob = cipher.encrypt("ghp_abc")
    token = cipher.decrypt(blob)
"""

from __future__ import annotations

import binascii
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from clawconfig.errors import ConfigurationError, DecryptionError

IV_BYTES = 16
TAG_BYTES = 16
KEY_HEX_LENGTH = 64


class TokenCipher:
    """Encrypts and decrypts credential strings with a shared AES-256 key."""

    def __init__(self, key_hex: str):
        if not key_hex:
            raise ConfigurationError(
                "ENCRYPTION_KEY is required. Generate with: openssl rand -hex 32"
            )
        if len(key_hex) != KEY_HEX_LENGTH:
            raise ConfigurationError(
                "ENCRYPTION_KEY must be a 64-character hex string (32 bytes)"
            )
        try:
            key = bytes.fromhex(key_hex)
        except ValueError as e:
            raise ConfigurationError("ENCRYPTION_KEY is not valid hex") from e
        self._aead = AESGCM(key)

    @classmethod
    def from_settings(cls, settings) -> "TokenCipher":
        return cls(settings.encryption_key.get_secret_value())

    def encrypt(self, plaintext: str) -> str:
        iv = os.urandom(IV_BYTES)
        sealed = self._aead.encrypt(iv, plaintext.encode("utf-8"), None)
        encrypted, tag = sealed[:-TAG_BYTES], sealed[-TAG_BYTES:]
        return f"{iv.hex()}:{tag.hex()}:{encrypted.hex()}"

    def decrypt(self, ciphertext: str) -> str:
        parts = ciphertext.split(":")
        if len(parts) != 3:
            raise DecryptionError("Invalid encrypted token format. Expected: iv:authTag:encrypted")

        try:
            iv, tag, encrypted = (binascii.unhexlify(p) for p in parts)
        except (binascii.Error, ValueError) as e:
            raise DecryptionError("Encrypted token is not valid hex") from e

        if len(tag) != TAG_BYTES:
            raise DecryptionError("Invalid authentication tag length")

        try:
            plaintext = self._aead.decrypt(iv, encrypted + tag, None)
        except InvalidTag as e:
            raise DecryptionError("Authentication failed: wrong key or tampered token") from e
        except ValueError as e:
            raise DecryptionError(f"Invalid token parameters: {e}") from e

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecryptionError("Decrypted token is not valid UTF-8") from e

    def __repr__(self) -> str:
        return "TokenCipher(key=**********)"
