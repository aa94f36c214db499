"""Encrypted string values as transmitted by the vault service.

An encrypted string has the form ``<type>.<part>|<part>|...`` where every
part is standard base64. The type decides how many parts there are:

    0  AES-CBC-256                       iv|data
    1  AES-CBC-128 + HMAC-SHA256         iv|data|mac
    2  AES-CBC-256 + HMAC-SHA256         iv|data|mac
    3  RSA-2048-OAEP-SHA256              data
    4  RSA-2048-OAEP-SHA1                data
    5  RSA-2048-OAEP-SHA256 + HMAC       data|mac
    6  RSA-2048-OAEP-SHA1 + HMAC         data|mac
"""

import base64
import binascii
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

from .exceptions import InvalidCipherStringError


class EncryptionType(IntEnum):
    """Encryption scheme named by the type prefix."""

    AES_CBC_256_B64 = 0
    AES_CBC_128_HMAC_SHA256_B64 = 1
    AES_CBC_256_HMAC_SHA256_B64 = 2
    RSA_2048_OAEP_SHA256_B64 = 3
    RSA_2048_OAEP_SHA1_B64 = 4
    RSA_2048_OAEP_SHA256_HMAC_SHA256_B64 = 5
    RSA_2048_OAEP_SHA1_HMAC_SHA256_B64 = 6


PART_COUNTS: dict[EncryptionType, int] = {
    EncryptionType.AES_CBC_256_B64: 2,
    EncryptionType.AES_CBC_128_HMAC_SHA256_B64: 3,
    EncryptionType.AES_CBC_256_HMAC_SHA256_B64: 3,
    EncryptionType.RSA_2048_OAEP_SHA256_B64: 1,
    EncryptionType.RSA_2048_OAEP_SHA1_B64: 1,
    EncryptionType.RSA_2048_OAEP_SHA256_HMAC_SHA256_B64: 2,
    EncryptionType.RSA_2048_OAEP_SHA1_HMAC_SHA256_B64: 2,
}

SYMMETRIC_TYPES = frozenset({
    EncryptionType.AES_CBC_256_B64,
    EncryptionType.AES_CBC_128_HMAC_SHA256_B64,
    EncryptionType.AES_CBC_256_HMAC_SHA256_B64,
})


def _b64decode(value: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidCipherStringError(f"Invalid base64 segment: {e}") from e


@dataclass(frozen=True)
class CipherString:
    """A parsed encrypted string.

    ``raw`` keeps the exact transmitted text so that serialization is
    lossless; the decoded parts are derived from it.
    """

    raw: str
    enc_type: EncryptionType = field(compare=False)
    iv: Optional[bytes] = field(default=None, compare=False, repr=False)
    data: bytes = field(default=b"", compare=False, repr=False)
    mac: Optional[bytes] = field(default=None, compare=False, repr=False)

    @classmethod
    def parse(cls, raw: str) -> "CipherString":
        """
        Parse an encrypted string.

        Args:
            raw: Text in ``<type>.<parts>`` form

        Returns:
            CipherString

        Raises:
            InvalidCipherStringError: If the text is not an encrypted string
        """
        if not isinstance(raw, str):
            raise InvalidCipherStringError(
                f"Expected encrypted string, got {type(raw).__name__}"
            )

        prefix, sep, body = raw.partition(".")
        if not sep or not prefix.isdigit():
            raise InvalidCipherStringError("Missing encryption type prefix")

        try:
            enc_type = EncryptionType(int(prefix))
        except ValueError:
            raise InvalidCipherStringError(f"Unknown encryption type: {prefix}")

        parts = body.split("|")
        expected = PART_COUNTS[enc_type]
        if len(parts) != expected:
            raise InvalidCipherStringError(
                f"Type {enc_type.value} expects {expected} part(s), got {len(parts)}"
            )

        decoded = [_b64decode(part) for part in parts]

        if enc_type in SYMMETRIC_TYPES:
            iv, data = decoded[0], decoded[1]
            mac = decoded[2] if len(decoded) == 3 else None
        else:
            iv, data = None, decoded[0]
            mac = decoded[1] if len(decoded) == 2 else None

        return cls(raw=raw, enc_type=enc_type, iv=iv, data=data, mac=mac)

    @classmethod
    def build(
        cls,
        enc_type: EncryptionType,
        data: bytes,
        iv: Optional[bytes] = None,
        mac: Optional[bytes] = None,
    ) -> "CipherString":
        """Assemble an encrypted string from its binary parts."""
        parts = [p for p in (iv, data, mac) if p is not None]
        body = "|".join(base64.b64encode(p).decode("ascii") for p in parts)
        return cls.parse(f"{int(enc_type)}.{body}")

    @property
    def is_symmetric(self) -> bool:
        """Check if this value is decryptable with a symmetric key."""
        return self.enc_type in SYMMETRIC_TYPES

    def __str__(self) -> str:
        return self.raw
