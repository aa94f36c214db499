"""Exceptions raised by the cipher suite."""


class CryptoError(Exception):
    """Base exception for key derivation and decryption."""

    pass


class InvalidCipherStringError(CryptoError, ValueError):
    """Raised when a value is not a well-formed encrypted string."""

    def __init__(self, message: str = "Malformed encrypted string."):
        super().__init__(message)


class DecryptionError(CryptoError):
    """Raised when an encrypted string cannot be decrypted."""

    def __init__(self, message: str = "Failed to decrypt value."):
        super().__init__(message)


class CipherLockedError(CryptoError):
    """Raised when decryption is attempted without derived key material."""

    def __init__(self, message: str = "Cipher suite is locked. Enter the master password first."):
        super().__init__(message)
