"""AES-CTR encryption of serialized calendars.

The output carries no authentication tag: tampering is not detectable.
"""

import logging
import os
from dataclasses import dataclass

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..exceptions import CipherInitError, KeyDecodeError, RandomSourceError

logger = logging.getLogger(__name__)

IV_SIZE = 16  # AES block size
VALID_KEY_SIZES = (16, 24, 32)


@dataclass(frozen=True)
class EncryptedPayload:
    """Ciphertext plus the IV needed to decrypt it. The IV is not secret."""

    iv: bytes
    ciphertext: bytes


class Encryptor:
    """Encrypts bytes with AES in counter mode under a fixed key."""

    def __init__(self, key_hex: str):
        """Decode and validate the key.

        Args:
            key_hex: AES key as hexadecimal text (32, 48 or 64 hex digits)

        Raises:
            KeyDecodeError: If the key is not valid hexadecimal
            CipherInitError: If the decoded key has an invalid AES length
        """
        try:
            key = bytes.fromhex(key_hex.strip())
        except (AttributeError, TypeError, ValueError) as e:
            raise KeyDecodeError("Encryption key is not valid hexadecimal") from e

        if len(key) not in VALID_KEY_SIZES:
            raise CipherInitError(
                f"Invalid AES key length {len(key)} bytes; expected one of {VALID_KEY_SIZES}"
            )

        self._key = key
        logger.debug("Encryptor initialized with %d-bit key", len(key) * 8)

    def _cipher(self, iv: bytes) -> Cipher:
        try:
            return Cipher(algorithms.AES(self._key), modes.CTR(iv))
        except ValueError as e:
            raise CipherInitError(f"Failed to initialise cipher: {e}") from e

    @staticmethod
    def generate_iv() -> bytes:
        """Return a fresh random IV from the OS random source.

        Raises:
            RandomSourceError: If no random source is available
        """
        try:
            return os.urandom(IV_SIZE)
        except (NotImplementedError, OSError) as e:
            raise RandomSourceError(f"Random source unavailable: {e}") from e

    def encrypt(self, plaintext: bytes) -> EncryptedPayload:
        """Encrypt bytes under a freshly generated IV."""
        iv = self.generate_iv()
        encryptor = self._cipher(iv).encryptor()
        ciphertext = encryptor.update(plaintext) + encryptor.finalize()
        return EncryptedPayload(iv=iv, ciphertext=ciphertext)

    def decrypt(self, payload: EncryptedPayload) -> bytes:
        """Decrypt a payload produced with the same key."""
        if len(payload.iv) != IV_SIZE:
            raise CipherInitError(f"Invalid IV length {len(payload.iv)} bytes; expected {IV_SIZE}")
        decryptor = self._cipher(payload.iv).decryptor()
        return decryptor.update(payload.ciphertext) + decryptor.finalize()
