"""Vault snapshot data models.

Field names follow the service's sync document. Each field lists the
capitalized alias the service emits; cached copies use the lowercase
canonical names.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from typing import Any, Optional
from uuid import UUID

from ..crypto.cipher_string import CipherString
from .wire import WireModel, wire_field


class CipherType(IntEnum):
    """Item type discriminant of a vault entry."""

    LOGIN = 1
    SECURE_NOTE = 2
    CARD = 3
    IDENTITY = 4


class FieldType(IntEnum):
    """Type of a custom field."""

    TEXT = 0
    HIDDEN = 1
    BOOLEAN = 2
    LINKED = 3


class UriMatchType(IntEnum):
    """Rule used to match a login URI against a site."""

    DOMAIN = 0
    HOST = 1
    STARTS_WITH = 2
    EXACT = 3
    REGULAR_EXPRESSION = 4
    NEVER = 5


@dataclass
class Profile(WireModel):
    """Account identity as of the last sync."""

    uuid: UUID = wire_field("Id")
    name: str = wire_field("Name")
    email: str = wire_field("Email")
    email_verified: bool = wire_field("EmailVerified")
    premium: bool = wire_field("Premium")
    language: str = wire_field("Culture")
    tfa_enabled: bool = wire_field("TwoFactorEnabled")
    key: CipherString = wire_field("Key")
    private_key: CipherString = wire_field("PrivateKey")
    security_stamp: str = wire_field("SecurityStamp")
    organizations: list[Any] = wire_field("Organizations", default_factory=list)
    master_password_hint: Optional[str] = wire_field("MasterPasswordHint", default=None)
    object: str = wire_field("Object", default="profile")


@dataclass
class Folder(WireModel):
    """User-defined grouping of entries."""

    uuid: UUID = wire_field("Id")
    name: CipherString = wire_field("Name")
    last_changed: datetime = wire_field("RevisionDate")
    object: str = wire_field("Object", default="folder")


@dataclass
class CipherEntryField(WireModel):
    """Custom field attached to an entry."""

    type_: int = wire_field("Type")
    name: Optional[CipherString] = wire_field("Name", default=None)
    value: Optional[CipherString] = wire_field("Value", default=None)


@dataclass
class CipherEntryHistory(WireModel):
    """A previously used password."""

    password: CipherString = wire_field("Password")
    last_used_date: datetime = wire_field("LastUsedDate")


@dataclass
class CipherEntryUriMatch(WireModel):
    """Login URI together with its match rule."""

    uri: Optional[CipherString] = wire_field("Uri", default=None)
    match_: Optional[int] = wire_field("Match", default=None)

    @property
    def match_type(self) -> Optional[UriMatchType]:
        """Match rule as an enum, None when unset (account default) or unknown."""
        if self.match_ is None:
            return None
        try:
            return UriMatchType(self.match_)
        except ValueError:
            return None


@dataclass
class CipherEntryData(WireModel):
    """Type-specific payload of an entry.

    ``uri`` and ``uris`` are independent: the service may send either,
    both or neither, and each is kept exactly as received.
    """

    name: CipherString = wire_field("Name")
    uri: Optional[CipherString] = wire_field("Uri", default=None)
    uris: Optional[list[CipherEntryUriMatch]] = wire_field("Uris", default=None)
    username: Optional[CipherString] = wire_field("Username", default=None)
    password: Optional[CipherString] = wire_field("Password", default=None)
    password_last_changed: Optional[datetime] = wire_field("PasswordRevisionDate", default=None)
    totp: Optional[CipherString] = wire_field("Totp", default=None)
    notes: Optional[CipherString] = wire_field("Notes", default=None)
    fields: Optional[list[CipherEntryField]] = wire_field("Fields", default=None)
    password_history: Optional[list[CipherEntryHistory]] = wire_field("PasswordHistory", default=None)

    @property
    def all_uris(self) -> list[CipherString]:
        """Every URI carried by the payload, singular form first."""
        found = [self.uri] if self.uri is not None else []
        for match in self.uris or []:
            if match.uri is not None and match.uri not in found:
                found.append(match.uri)
        return found


@dataclass
class CipherEntry(WireModel):
    """A single vault item."""

    uuid: UUID = wire_field("Id")
    type_: int = wire_field("Type")
    name: CipherString = wire_field("Name")
    data: CipherEntryData = wire_field("Data")
    favorite: bool = wire_field("Favorite")
    edit: bool = wire_field("Edit")
    organization_tfa: bool = wire_field("OrganizationUseTotp")
    last_changed: datetime = wire_field("RevisionDate")
    collection_ids: list[UUID] = wire_field("CollectionIds", default_factory=list)
    folder_id: Optional[UUID] = wire_field("FolderId", default=None)
    organization_id: Optional[UUID] = wire_field("OrganizationId", default=None)
    notes: Optional[CipherString] = wire_field("Notes", default=None)
    card: Optional[Any] = wire_field("Card", default=None)
    identity: Optional[Any] = wire_field("Identity", default=None)
    secure_note: Optional[Any] = wire_field("SecureNote", default=None)
    fields: Optional[list[CipherEntryField]] = wire_field("Fields", default=None)
    password_history: Optional[list[CipherEntryHistory]] = wire_field("PasswordHistory", default=None)
    attachments: Optional[Any] = wire_field("Attachments", default=None)
    object: str = wire_field("Object", default="cipherDetails")

    @property
    def cipher_type(self) -> Optional[CipherType]:
        """Item type as an enum, None for types this client does not know."""
        try:
            return CipherType(self.type_)
        except ValueError:
            return None

    @property
    def is_login(self) -> bool:
        """Check if this entry is a login."""
        return self.type_ == CipherType.LOGIN


@dataclass
class VaultData(WireModel):
    """The vault as of the last successful sync."""

    profile: Profile = wire_field("Profile")
    folders: list[Folder] = wire_field("Folders", default_factory=list)
    collections: list[Any] = wire_field("Collections", default_factory=list)
    ciphers: list[CipherEntry] = wire_field("Ciphers", default_factory=list)
    object: str = wire_field("Object", default="sync")

    @property
    def entry_count(self) -> int:
        """Number of entries in the vault."""
        return len(self.ciphers)

    def folder(self, folder_id: UUID) -> Optional[Folder]:
        """Find a folder by id."""
        for folder in self.folders:
            if folder.uuid == folder_id:
                return folder
        return None

    def entries_in_folder(self, folder_id: Optional[UUID]) -> list[CipherEntry]:
        """Entries filed under a folder, or unfiled entries for None."""
        return [c for c in self.ciphers if c.folder_id == folder_id]

    def favorites(self) -> list[CipherEntry]:
        """Entries marked as favorite."""
        return [c for c in self.ciphers if c.favorite]
