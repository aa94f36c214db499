"""Key derivation and field decryption for vault data.

Uses the cryptography library for:
- PBKDF2-HMAC-SHA256 master key derivation (iteration count from prelogin)
- HKDF-Expand-SHA256 key stretching into encryption and MAC keys
- AES-256-CBC + HMAC-SHA256 decryption of encrypted strings
"""

import base64
import os
from typing import Optional, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.hkdf import HKDFExpand
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .cipher_string import CipherString, EncryptionType
from .exceptions import CipherLockedError, CryptoError, DecryptionError

KEY_SIZE = 32  # AES-256
IV_SIZE = 16  # AES block size
BLOCK_BITS = 128

# Only PBKDF2-SHA256 is derivable here
KDF_PBKDF2_SHA256 = 0


def normalize_email(email: str) -> str:
    """Normalize an email the way the service salts the master key."""
    return email.strip().lower()


def pbkdf2_sha256(secret: bytes, salt: bytes, iterations: int) -> bytes:
    """Derive a 32-byte key with PBKDF2-HMAC-SHA256."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(secret)


def hkdf_expand(key: bytes, info: bytes) -> bytes:
    """Expand a key with HKDF-SHA256 (no extract step)."""
    return HKDFExpand(algorithm=hashes.SHA256(), length=KEY_SIZE, info=info).derive(key)


class SymmetricKey:
    """An AES-256 encryption key with an optional HMAC-SHA256 key."""

    def __init__(self, enc_key: bytes, mac_key: Optional[bytes] = None):
        if len(enc_key) != KEY_SIZE:
            raise ValueError(f"Encryption key must be {KEY_SIZE} bytes, got {len(enc_key)}")
        if mac_key is not None and len(mac_key) != KEY_SIZE:
            raise ValueError(f"MAC key must be {KEY_SIZE} bytes, got {len(mac_key)}")
        self._enc_key = enc_key
        self._mac_key = mac_key

    @classmethod
    def from_bytes(cls, key: bytes) -> "SymmetricKey":
        """Split a 64-byte key into encryption and MAC halves."""
        if len(key) == KEY_SIZE * 2:
            return cls(key[:KEY_SIZE], key[KEY_SIZE:])
        if len(key) == KEY_SIZE:
            return cls(key)
        raise DecryptionError(f"Unexpected symmetric key length: {len(key)}")

    def __repr__(self) -> str:
        return f"<SymmetricKey mac={'yes' if self._mac_key else 'no'}>"

    def _mac(self, iv: bytes, data: bytes) -> hmac.HMAC:
        h = hmac.HMAC(self._mac_key, hashes.SHA256())
        h.update(iv + data)
        return h

    def decrypt(self, value: Union[CipherString, str]) -> bytes:
        """
        Decrypt an encrypted string.

        Args:
            value: CipherString or its raw text

        Returns:
            Decrypted plaintext bytes

        Raises:
            DecryptionError: On MAC mismatch, bad padding or unsupported type
        """
        if isinstance(value, str):
            value = CipherString.parse(value)

        if value.enc_type == EncryptionType.AES_CBC_256_HMAC_SHA256_B64:
            if self._mac_key is None:
                raise DecryptionError("Value is authenticated but key has no MAC part")
            try:
                self._mac(value.iv, value.data).verify(value.mac)
            except InvalidSignature:
                raise DecryptionError("MAC verification failed - wrong key or tampered data")
        elif value.enc_type != EncryptionType.AES_CBC_256_B64:
            raise DecryptionError(f"Unsupported encryption type: {value.enc_type.name}")

        try:
            decryptor = Cipher(algorithms.AES(self._enc_key), modes.CBC(value.iv)).decryptor()
            padded = decryptor.update(value.data) + decryptor.finalize()
            unpadder = padding.PKCS7(BLOCK_BITS).unpadder()
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as e:
            raise DecryptionError(f"AES decryption failed: {e}") from e

    def encrypt(self, plaintext: Union[bytes, str], iv: Optional[bytes] = None) -> CipherString:
        """
        Encrypt plaintext as a type 2 encrypted string.

        Args:
            plaintext: Data to encrypt (str is UTF-8 encoded)
            iv: Fixed IV, random if omitted

        Returns:
            CipherString
        """
        if self._mac_key is None:
            raise CryptoError("Encryption requires a MAC key")
        if isinstance(plaintext, str):
            plaintext = plaintext.encode("utf-8")

        iv = iv or os.urandom(IV_SIZE)
        padder = padding.PKCS7(BLOCK_BITS).padder()
        padded = padder.update(plaintext) + padder.finalize()
        encryptor = Cipher(algorithms.AES(self._enc_key), modes.CBC(iv)).encryptor()
        data = encryptor.update(padded) + encryptor.finalize()
        mac = self._mac(iv, data).finalize()

        return CipherString.build(EncryptionType.AES_CBC_256_HMAC_SHA256_B64, data, iv=iv, mac=mac)


class CipherSuite:
    """
    Key material derived from a user's master password.

    Holds the master key, the master-key hash sent to the identity
    service in place of the password, and, once unlocked, the account
    symmetric key that protects every vault field. Lives in memory only.
    """

    def __init__(self, master_key: bytes, master_key_hash: str):
        self.master_key = master_key
        self.master_key_hash = master_key_hash
        self.stretched_key = SymmetricKey(
            hkdf_expand(master_key, b"enc"),
            hkdf_expand(master_key, b"mac"),
        )
        self._user_key: Optional[SymmetricKey] = None

    @classmethod
    def from_credentials(cls, email: str, password: str, kdf_iterations: int) -> "CipherSuite":
        """
        Derive the master key and its hash from email and password.

        Args:
            email: Account email (salt, normalized)
            password: Master password
            kdf_iterations: PBKDF2 iteration count from prelogin

        Returns:
            CipherSuite
        """
        if kdf_iterations < 1:
            raise CryptoError(f"Invalid KDF iteration count: {kdf_iterations}")

        password_bytes = password.encode("utf-8")
        master_key = pbkdf2_sha256(
            password_bytes,
            normalize_email(email).encode("utf-8"),
            kdf_iterations,
        )
        master_key_hash = base64.b64encode(
            pbkdf2_sha256(master_key, password_bytes, 1)
        ).decode("ascii")

        return cls(master_key, master_key_hash)

    def __repr__(self) -> str:
        return f"<CipherSuite unlocked={self.is_unlocked}>"

    @property
    def is_unlocked(self) -> bool:
        """Check if the account symmetric key has been decrypted."""
        return self._user_key is not None

    @property
    def user_key(self) -> SymmetricKey:
        """Get the account symmetric key. Raises if locked."""
        if self._user_key is None:
            raise CipherLockedError()
        return self._user_key

    def unlock(self, protected_key: Union[CipherString, str]) -> SymmetricKey:
        """
        Decrypt the account symmetric key with the stretched master key.

        Args:
            protected_key: Encrypted account key from the profile

        Returns:
            The account SymmetricKey

        Raises:
            DecryptionError: If the password was wrong or the key is corrupt
        """
        self._user_key = SymmetricKey.from_bytes(self.stretched_key.decrypt(protected_key))
        return self._user_key

    def decrypt(self, value: Union[CipherString, str]) -> bytes:
        """Decrypt with the account key if unlocked, the stretched master key otherwise."""
        key = self._user_key or self.stretched_key
        return key.decrypt(value)

    def decrypt_str(self, value: Optional[Union[CipherString, str]]) -> Optional[str]:
        """Decrypt to UTF-8 text, passing None through."""
        if value is None:
            return None
        try:
            return self.decrypt(value).decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecryptionError(f"Decrypted value is not UTF-8: {e}") from e
