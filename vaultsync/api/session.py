"""Session orchestration: login, sync and cache round trips.

``authenticate()`` chains prelogin, key derivation and token exchange into
an ``AuthData``; ``sync()`` fetches the vault for it. Neither falls back to
the cache on failure: that choice belongs to the caller, who can use
``read_app_data()`` explicitly.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from ..crypto.suite import KDF_PBKDF2_SHA256, CipherSuite
from ..exceptions import PreloginFailed
from ..models.app import AppData
from ..models.auth import AuthData
from ..models.vault import VaultData
from ..storage.persistence import read_app_data, save_app_data
from ..utils.logging import get_logger
from .client import ApiClient

logger = get_logger(__name__)


@contextmanager
def _api_client(client: Optional[ApiClient]) -> Iterator[ApiClient]:
    """Use the caller's client, or a temporary one closed afterwards."""
    if client is not None:
        yield client
        return

    with ApiClient() as owned:
        yield owned


def authenticate(email: str, password: str, client: Optional[ApiClient] = None) -> AuthData:
    """
    Log in and build an authenticated session.

    Args:
        email: Account email
        password: Master password (never sent; only its derived hash is)
        client: API client to use (default: a new one from settings)

    Returns:
        AuthData holding the bearer token, KDF parameters and cipher suite

    Raises:
        PreloginFailed: If KDF parameters cannot be discovered or are unusable
        LoginFailed: If the token exchange fails
    """
    with _api_client(client) as api:
        prelogin = api.prelogin(email)

        if prelogin.kdf != KDF_PBKDF2_SHA256:
            raise PreloginFailed(
                f"unsupported KDF algorithm {prelogin.kdf} (only PBKDF2-SHA256 is supported)"
            )
        if prelogin.kdf_iterations < 1:
            raise PreloginFailed(f"invalid KDF iteration count {prelogin.kdf_iterations}")

        cipher = CipherSuite.from_credentials(email, password, prelogin.kdf_iterations)
        login = api.authenticate_with_token(email, cipher)

    logger.info(f"Authenticated ({login.token_type} token, expires in {login.expires_in}s)")

    return AuthData(
        access_token=login.access_token,
        expires_in=login.expires_in,
        token_type=login.token_type,
        kdf=prelogin.kdf,
        kdf_iterations=prelogin.kdf_iterations,
        cipher=cipher,
    )


def sync(auth: AuthData, client: Optional[ApiClient] = None) -> VaultData:
    """
    Fetch the full vault snapshot for a session.

    Args:
        auth: Authenticated session
        client: API client to use (default: a new one from settings)

    Returns:
        VaultData

    Raises:
        RequestFailed: If the sync request or its document fails
    """
    with _api_client(client) as api:
        return api.sync(auth)


def login_and_sync(
    email: str,
    password: str,
    client: Optional[ApiClient] = None,
    data_dir: Optional[Path] = None,
    save: bool = True,
) -> AppData:
    """
    Authenticate, fetch the vault, unlock it and optionally cache the result.

    Args:
        email: Account email
        password: Master password
        client: API client to use (default: a new one from settings)
        data_dir: Cache directory override
        save: Whether to write the cache

    Returns:
        AppData with an unlocked cipher suite

    Raises:
        PreloginFailed, LoginFailed, RequestFailed, VaultDataWriteFailed
        DecryptionError: If the account key cannot be decrypted
    """
    with _api_client(client) as api:
        auth = authenticate(email, password, client=api)
        vault = api.sync(auth)

    auth.cipher.unlock(vault.profile.key)

    if save:
        save_app_data(auth, vault, data_dir=data_dir)

    return AppData(auth=auth, vault=vault)


__all__ = [
    "authenticate",
    "sync",
    "login_and_sync",
    "read_app_data",
    "save_app_data",
]
