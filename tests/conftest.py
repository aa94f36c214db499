"""Shared pytest fixtures for vaultsync tests."""

from pathlib import Path
from typing import Callable, Generator, Optional

import httpx
import pytest

EMAIL = "user@example.com"
PASSWORD = "correct horse battery staple"
KDF_ITERATIONS = 1000  # Low count keeps derivation fast in tests
ACCESS_TOKEN = "eyJhbGciOiJSUzI1NiJ9.test-token"

IDENTITY_URL = "https://identity.vault.test"
API_URL = "https://api.vault.test/"

PROFILE_ID = "5e8bd0ea-3c2d-4f8a-9a51-0b1f2d3c4e5f"
FOLDER_ID = "0c9f2d6e-7a41-4b83-b5e2-8d1a6f3c9e70"
LOGIN_ID = "a1b2c3d4-e5f6-4789-8abc-def012345678"
NOTE_ID = "b7e1c0d2-94a3-4f5b-8c6d-2e3f4a5b6c7d"
COLLECTION_ID = "c3d4e5f6-0718-4293-a4b5-c6d7e8f90a1b"

REVISION_DATE = "2024-03-01T12:30:45.1234567Z"
PASSWORD_CHANGED = "2023-11-20T08:00:00Z"

# Fixed IV so every fixture encrypts identical text to identical strings
FIXED_IV = bytes(range(16))


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch) -> Generator[Path, None, None]:
    """Point settings at a per-test data directory and reset them afterwards."""
    from vaultsync.config.settings import configure

    for name in (
        "VAULTSYNC_IDENTITY_URL",
        "VAULTSYNC_API_URL",
        "VAULTSYNC_DEVICE_NAME",
        "VAULTSYNC_HTTP_TIMEOUT",
        "VAULTSYNC_LOG_FILE",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

    data_dir = tmp_path / "data"
    monkeypatch.setenv("VAULTSYNC_DATA_DIR", str(data_dir))
    configure(None)

    yield data_dir

    configure(None)


@pytest.fixture
def data_dir(isolated_settings: Path) -> Path:
    """The data directory the current test's settings resolve to."""
    return isolated_settings


@pytest.fixture
def cipher_suite():
    """Cipher suite derived from the test credentials (locked)."""
    from vaultsync.crypto import CipherSuite

    return CipherSuite.from_credentials(EMAIL, PASSWORD, KDF_ITERATIONS)


@pytest.fixture
def user_key():
    """The account symmetric key the test vault is encrypted with."""
    from vaultsync.crypto import SymmetricKey

    return SymmetricKey(bytes(range(32)), bytes(range(32, 64)))


@pytest.fixture
def user_key_bytes() -> bytes:
    return bytes(range(64))


@pytest.fixture
def protected_key(cipher_suite, user_key_bytes: bytes) -> str:
    """Account key encrypted with the stretched master key, as in a profile."""
    return cipher_suite.stretched_key.encrypt(user_key_bytes, iv=FIXED_IV).raw


@pytest.fixture
def encrypt(user_key) -> Callable[[str], str]:
    """Encrypt text with the account key, returning the raw encrypted string."""

    def _encrypt(text: str) -> str:
        return user_key.encrypt(text, iv=FIXED_IV).raw

    return _encrypt


@pytest.fixture
def sync_document(protected_key: str, encrypt) -> dict:
    """A sync response as the service sends it (capitalized keys)."""
    return {
        "Object": "sync",
        "Profile": {
            "Id": PROFILE_ID,
            "Name": "Test User",
            "Email": EMAIL,
            "EmailVerified": True,
            "Premium": False,
            "Culture": "en-US",
            "TwoFactorEnabled": False,
            "Key": protected_key,
            "PrivateKey": encrypt("private key material"),
            "SecurityStamp": "4f1e2d3c-stamp",
            "Organizations": [],
            "MasterPasswordHint": None,
            "Object": "profile",
        },
        "Folders": [
            {
                "Id": FOLDER_ID,
                "Name": encrypt("Work"),
                "RevisionDate": REVISION_DATE,
                "Object": "folder",
            },
        ],
        "Collections": [],
        "Ciphers": [
            {
                "Id": LOGIN_ID,
                "Type": 1,
                "Name": encrypt("GitHub"),
                "Notes": None,
                "Data": {
                    "Name": encrypt("GitHub"),
                    "Uri": encrypt("https://github.com/login"),
                    "Uris": [
                        {"Uri": encrypt("https://github.com"), "Match": 0},
                        {"Uri": encrypt("https://gist.github.com"), "Match": None},
                    ],
                    "Username": encrypt("octocat"),
                    "Password": encrypt("hunter2"),
                    "PasswordRevisionDate": PASSWORD_CHANGED,
                    "Totp": None,
                },
                "Favorite": True,
                "Edit": True,
                "OrganizationUseTotp": False,
                "RevisionDate": REVISION_DATE,
                "CollectionIds": [COLLECTION_ID],
                "FolderId": FOLDER_ID,
                "OrganizationId": None,
                "Fields": [
                    {"Type": 1, "Name": encrypt("PIN"), "Value": encrypt("1234")},
                ],
                "PasswordHistory": [
                    {"Password": encrypt("hunter1"), "LastUsedDate": PASSWORD_CHANGED},
                ],
                "Attachments": None,
                "Object": "cipherDetails",
            },
            {
                "Id": NOTE_ID,
                "Type": 2,
                "Name": encrypt("Wi-Fi"),
                "Notes": encrypt("router is in the hallway"),
                "Data": {
                    "Name": encrypt("Wi-Fi"),
                    "Notes": encrypt("router is in the hallway"),
                },
                "SecureNote": {"Type": 0},
                "Favorite": False,
                "Edit": True,
                "OrganizationUseTotp": False,
                "RevisionDate": REVISION_DATE,
                "FolderId": None,
                "Object": "cipherDetails",
            },
        ],
        # Sections the client does not model are ignored
        "Domains": {"EquivalentDomains": [], "GlobalEquivalentDomains": []},
        "Policies": [],
        "Sends": [],
    }


@pytest.fixture
def canonical_sync_document(protected_key: str, encrypt) -> dict:
    """The same vault as ``sync_document`` spelled with canonical names."""
    return {
        "object": "sync",
        "profile": {
            "uuid": PROFILE_ID,
            "name": "Test User",
            "email": EMAIL,
            "email_verified": True,
            "premium": False,
            "language": "en-US",
            "tfa_enabled": False,
            "key": protected_key,
            "private_key": encrypt("private key material"),
            "security_stamp": "4f1e2d3c-stamp",
            "organizations": [],
            "master_password_hint": None,
            "object": "profile",
        },
        "folders": [
            {
                "uuid": FOLDER_ID,
                "name": encrypt("Work"),
                "last_changed": REVISION_DATE,
                "object": "folder",
            },
        ],
        "collections": [],
        "ciphers": [
            {
                "uuid": LOGIN_ID,
                "type_": 1,
                "name": encrypt("GitHub"),
                "notes": None,
                "data": {
                    "name": encrypt("GitHub"),
                    "uri": encrypt("https://github.com/login"),
                    "uris": [
                        {"uri": encrypt("https://github.com"), "match_": 0},
                        {"uri": encrypt("https://gist.github.com"), "match_": None},
                    ],
                    "username": encrypt("octocat"),
                    "password": encrypt("hunter2"),
                    "password_last_changed": PASSWORD_CHANGED,
                    "totp": None,
                },
                "favorite": True,
                "edit": True,
                "organization_tfa": False,
                "last_changed": REVISION_DATE,
                "collection_ids": [COLLECTION_ID],
                "folder_id": FOLDER_ID,
                "organization_id": None,
                "fields": [
                    {"type_": 1, "name": encrypt("PIN"), "value": encrypt("1234")},
                ],
                "password_history": [
                    {"password": encrypt("hunter1"), "last_used_date": PASSWORD_CHANGED},
                ],
                "attachments": None,
                "object": "cipherDetails",
            },
            {
                "uuid": NOTE_ID,
                "type_": 2,
                "name": encrypt("Wi-Fi"),
                "notes": encrypt("router is in the hallway"),
                "data": {
                    "name": encrypt("Wi-Fi"),
                    "notes": encrypt("router is in the hallway"),
                },
                "secure_note": {"Type": 0},
                "favorite": False,
                "edit": True,
                "organization_tfa": False,
                "last_changed": REVISION_DATE,
                "folder_id": None,
                "object": "cipherDetails",
            },
        ],
    }


@pytest.fixture
def vault_data(sync_document: dict):
    """VaultData parsed from the sample sync document."""
    from vaultsync.models import VaultData

    return VaultData.from_dict(sync_document)


@pytest.fixture
def auth_data(cipher_suite):
    """An authenticated session as ``authenticate()`` would build it."""
    from vaultsync.models import AuthData

    return AuthData(
        access_token=ACCESS_TOKEN,
        expires_in=3600,
        token_type="Bearer",
        kdf=0,
        kdf_iterations=KDF_ITERATIONS,
        cipher=cipher_suite,
    )


class FakeVaultServer:
    """In-process stand-in for the identity and API services.

    Routes are keyed by URL path. A route set to ``None`` fails at the
    transport level instead of answering.
    """

    def __init__(self, sync_document: dict):
        self.requests: list[httpx.Request] = []
        self.routes: dict[str, Optional[tuple[int, object]]] = {
            "/accounts/prelogin": (200, {"Kdf": 0, "KdfIterations": KDF_ITERATIONS}),
            "/connect/token": (
                200,
                {
                    "access_token": ACCESS_TOKEN,
                    "expires_in": 3600,
                    "token_type": "Bearer",
                    "refresh_token": "refresh-token",
                    "scope": "api offline_access",
                },
            ),
            "/sync": (200, sync_document),
        }

    def respond(self, path: str, status: int, body: object) -> None:
        self.routes[path] = (status, body)

    def disconnect(self, path: str) -> None:
        self.routes[path] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes[request.url.path]
        if route is None:
            raise httpx.ConnectError("connection refused", request=request)

        status, body = route
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def client(self):
        from vaultsync.api import ApiClient

        return ApiClient(
            identity_url=IDENTITY_URL,
            api_url=API_URL,
            device_name="pytest",
            http_client=httpx.Client(transport=httpx.MockTransport(self.handler)),
        )


@pytest.fixture
def server(sync_document: dict) -> FakeVaultServer:
    """Fake identity and API services answering for the test account."""
    return FakeVaultServer(sync_document)


@pytest.fixture
def api_client(server: FakeVaultServer) -> Generator:
    """ApiClient wired to the fake services."""
    client = server.client()
    yield client
    client.close()
