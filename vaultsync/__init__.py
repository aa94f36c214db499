"""vaultsync - Password vault sync client."""

__version__ = "0.1.0"

from .api import authenticate, read_app_data, save_app_data, sync
from .exceptions import (
    ApiError,
    LoginFailed,
    PreloginFailed,
    RequestFailed,
    VaultDataReadFailed,
    VaultDataWriteFailed,
)
from .models import AppData, AuthData, VaultData

__all__ = [
    "__version__",
    # Pipeline
    "authenticate",
    "sync",
    "save_app_data",
    "read_app_data",
    # Models
    "AppData",
    "AuthData",
    "VaultData",
    # Errors
    "ApiError",
    "PreloginFailed",
    "LoginFailed",
    "RequestFailed",
    "VaultDataWriteFailed",
    "VaultDataReadFailed",
]
