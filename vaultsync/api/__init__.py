"""Vault service API for vaultsync.

Usage:
    from vaultsync.api import authenticate, sync, save_app_data, read_app_data

    auth = authenticate(email, password)
    vault = sync(auth)
    save_app_data(auth, vault)

    # Later, without re-authenticating
    app = read_app_data()
    app.unlock(password)
"""

from .client import ApiClient, new_device_id
from .session import (
    authenticate,
    login_and_sync,
    read_app_data,
    save_app_data,
    sync,
)

__all__ = [
    "ApiClient",
    "new_device_id",
    "authenticate",
    "sync",
    "login_and_sync",
    "read_app_data",
    "save_app_data",
]
