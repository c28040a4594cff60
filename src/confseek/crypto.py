"""Symmetric encryption of configuration file contents.

Payloads are AES-CBC ciphertext with PKCS7 padding, authenticated with
HMAC-SHA256, wrapped in a base64-encoded JSON envelope
``{"iv": ..., "value": ..., "mac": ...}``.
"""

import base64
import binascii
import json
import os
from abc import ABC
from abc import abstractmethod

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher as BlockCipher
from cryptography.hazmat.primitives.ciphers import algorithms
from cryptography.hazmat.primitives.ciphers import modes

from .exceptions import DecryptionError
from .exceptions import EncryptionError
from .exceptions import InvalidKeyError

DEFAULT_CIPHER = "AES-256-CBC"
KEY_PREFIX = "base64:"

# Cipher name -> key length in bytes
SUPPORTED_CIPHERS = {
    "AES-128-CBC": 16,
    "AES-256-CBC": 32,
}


class Cipher(ABC):
    """Encrypts and decrypts opaque byte strings with a fixed key."""

    @abstractmethod
    def encrypt(self, data: bytes) -> bytes:
        """Encrypt plaintext bytes."""

    @abstractmethod
    def decrypt(self, payload: bytes) -> bytes:
        """Decrypt a payload produced by ``encrypt``.

        Raises:
            DecryptionError: If the key is wrong or the payload is corrupt
        """


class AesCbcCipher(Cipher):
    """AES-CBC with an HMAC-SHA256 tag.

    Args:
        key: Raw key bytes (16 for AES-128-CBC, 32 for AES-256-CBC)
        cipher: Cipher name

    Raises:
        EncryptionError: If the cipher is unsupported or the key length is wrong
    """

    def __init__(self, key: bytes, cipher: str = DEFAULT_CIPHER):
        name = normalize_cipher(cipher)
        if len(key) != SUPPORTED_CIPHERS[name]:
            raise EncryptionError(
                None, f"{name} requires a {SUPPORTED_CIPHERS[name]}-byte key, got {len(key)} bytes"
            )
        self.key = key
        self.cipher = name

    def encrypt(self, data: bytes) -> bytes:
        iv = os.urandom(16)
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(data) + padder.finalize()
        encryptor = BlockCipher(algorithms.AES(self.key), modes.CBC(iv)).encryptor()
        value = encryptor.update(padded) + encryptor.finalize()

        iv_text = base64.b64encode(iv).decode("ascii")
        value_text = base64.b64encode(value).decode("ascii")
        envelope = {"iv": iv_text, "value": value_text, "mac": self._mac(iv_text, value_text).hex()}
        return base64.b64encode(json.dumps(envelope).encode("utf-8"))

    def decrypt(self, payload: bytes) -> bytes:
        try:
            envelope = json.loads(base64.b64decode(payload, validate=True))
            iv_text, value_text, mac = envelope["iv"], envelope["value"], bytes.fromhex(envelope["mac"])
            iv = base64.b64decode(iv_text, validate=True)
            value = base64.b64decode(value_text, validate=True)
        except (binascii.Error, ValueError, TypeError, KeyError) as e:
            raise DecryptionError(None, "The payload is invalid.") from e

        verifier = hmac.HMAC(self.key, hashes.SHA256())
        verifier.update(f"{iv_text}{value_text}".encode("ascii"))
        try:
            verifier.verify(mac)
        except InvalidSignature as e:
            raise DecryptionError(None, "The MAC is invalid.") from e

        try:
            decryptor = BlockCipher(algorithms.AES(self.key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(value) + decryptor.finalize()
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as e:
            raise DecryptionError(None, "Could not decrypt the data.") from e

    def _mac(self, iv_text: str, value_text: str) -> bytes:
        signer = hmac.HMAC(self.key, hashes.SHA256())
        signer.update(f"{iv_text}{value_text}".encode("ascii"))
        return signer.finalize()


def normalize_cipher(cipher: str) -> str:
    name = cipher.upper()
    if name not in SUPPORTED_CIPHERS:
        supported = ", ".join(SUPPORTED_CIPHERS)
        raise EncryptionError(None, f"Unsupported cipher {cipher}; supported ciphers: {supported}")
    return name


def generate_key(cipher: str = DEFAULT_CIPHER) -> bytes:
    """Generate a random key of the right length for a cipher."""
    return os.urandom(SUPPORTED_CIPHERS[normalize_cipher(cipher)])


def parse_key(key: str | bytes) -> bytes:
    """Turn a transport key into raw bytes.

    ``base64:``-prefixed text is decoded; any other text is used as UTF-8 bytes.

    Raises:
        InvalidKeyError: If a ``base64:`` key is not valid base64
    """
    if isinstance(key, bytes):
        return key
    if key.startswith(KEY_PREFIX):
        try:
            return base64.b64decode(key[len(KEY_PREFIX) :], validate=True)
        except binascii.Error as e:
            raise InvalidKeyError() from e
    return key.encode("utf-8")


def format_key(key: bytes) -> str:
    """Render raw key bytes in transportable ``base64:`` form."""
    return KEY_PREFIX + base64.b64encode(key).decode("ascii")
