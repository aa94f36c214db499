"""Local persistence for vaultsync."""

from .paths import default_data_dir, get_app_data_dir
from .persistence import (
    AUTH_FILE,
    VAULT_FILE,
    clear_app_data,
    read_app_data,
    save_app_data,
)

__all__ = [
    "AUTH_FILE",
    "VAULT_FILE",
    "default_data_dir",
    "get_app_data_dir",
    "save_app_data",
    "read_app_data",
    "clear_app_data",
]
