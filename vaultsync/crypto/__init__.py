"""Cipher suite for vaultsync.

Derives the master key and master-key hash from an email/password pair
and decrypts the encrypted string fields of a synced vault.

Usage:
    from vaultsync.crypto import CipherSuite
    suite = CipherSuite.from_credentials(email, password, kdf_iterations)
    suite.unlock(vault.profile.key)
    name = suite.decrypt_str(entry.name)
"""

from .cipher_string import CipherString, EncryptionType
from .exceptions import (
    CipherLockedError,
    CryptoError,
    DecryptionError,
    InvalidCipherStringError,
)
from .suite import KDF_PBKDF2_SHA256, CipherSuite, SymmetricKey

__all__ = [
    # Values
    "CipherString",
    "EncryptionType",
    # Keys
    "CipherSuite",
    "SymmetricKey",
    "KDF_PBKDF2_SHA256",
    # Exceptions
    "CryptoError",
    "InvalidCipherStringError",
    "DecryptionError",
    "CipherLockedError",
]
