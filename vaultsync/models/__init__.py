"""Data models for vaultsync."""

from .app import AppData
from .auth import AuthData, LoginResponse, PreloginResponse
from .vault import (
    CipherEntry,
    CipherEntryData,
    CipherEntryField,
    CipherEntryHistory,
    CipherEntryUriMatch,
    CipherType,
    FieldType,
    Folder,
    Profile,
    UriMatchType,
    VaultData,
)
from .wire import WireFormatError, WireModel, parse_datetime, wire_field

__all__ = [
    # Wire format
    "WireModel",
    "WireFormatError",
    "wire_field",
    "parse_datetime",
    # Auth
    "AuthData",
    "PreloginResponse",
    "LoginResponse",
    # Vault
    "Profile",
    "Folder",
    "CipherEntry",
    "CipherEntryData",
    "CipherEntryField",
    "CipherEntryHistory",
    "CipherEntryUriMatch",
    "CipherType",
    "FieldType",
    "UriMatchType",
    "VaultData",
    # Pairing
    "AppData",
]
