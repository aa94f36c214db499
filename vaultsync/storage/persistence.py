"""Local cache of the session and vault snapshot.

The session is stored in ``auth.json`` and the vault in ``vault.json``
inside the application data directory. Each file is a complete JSON
document written by the model's ``to_dict()``. The cipher suite is never
written; a restored session must be unlocked with the password again.

Each file is replaced atomically (temporary file + ``os.replace``), so a
single file is never half-written. Both documents are encoded before either
file is replaced, so a serialization failure touches nothing. A crash
between the two replaces leaves a fresh ``auth.json`` next to the previous
``vault.json``.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, TypeVar

from ..exceptions import VaultDataReadFailed, VaultDataWriteFailed
from ..config.settings import get_settings
from ..models.app import AppData
from ..models.auth import AuthData
from ..models.vault import VaultData
from ..models.wire import WireModel
from ..utils.logging import get_logger
from .paths import get_app_data_dir

logger = get_logger(__name__)

AUTH_FILE = "auth.json"
VAULT_FILE = "vault.json"
CACHE_FILES = (AUTH_FILE, VAULT_FILE)

M = TypeVar("M", bound=WireModel)


def _data_dir(data_dir: Optional[Path]) -> Path:
    return get_app_data_dir(data_dir or get_settings().data_dir)


def _serialize(filename: str, model: WireModel) -> bytes:
    try:
        return json.dumps(model.to_dict(), indent=2, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        # UnicodeEncodeError (lone surrogates in server text) is a ValueError
        raise VaultDataWriteFailed(f"{filename}: {e}") from e


def _replace_file(directory: Path, filename: str, payload: bytes) -> Path:
    path = directory / filename

    tmp_name = None
    try:
        # mkstemp creates the file readable by the owner only
        fd, tmp_name = tempfile.mkstemp(prefix=f".{filename}.", suffix=".tmp", dir=directory)
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as e:
        raise VaultDataWriteFailed(f"{path}: {e}") from e
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)

    logger.debug(f"Wrote {path}")
    return path


def read_data_from(directory: Path, filename: str, model_cls: type[M]) -> M:
    """
    Read a model from a JSON file.

    Args:
        directory: Directory holding the file
        filename: File name inside the directory
        model_cls: Model class to build

    Returns:
        Model instance

    Raises:
        VaultDataReadFailed: If the file is missing, unreadable or malformed
    """
    path = directory / filename

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise VaultDataReadFailed(f"{path}: {e}") from e
    except ValueError as e:
        raise VaultDataReadFailed(f"{path}: invalid JSON: {e}") from e

    try:
        return model_cls.from_dict(data)
    except ValueError as e:
        raise VaultDataReadFailed(f"{path}: {e}") from e


def save_app_data(auth: AuthData, vault: VaultData, data_dir: Optional[Path] = None) -> Path:
    """
    Cache a session and vault snapshot.

    Args:
        auth: Session to store (without its cipher suite)
        vault: Vault snapshot to store
        data_dir: Directory override (default from settings or platform)

    Returns:
        The data directory used

    Raises:
        VaultDataWriteFailed: If the directory or either file cannot be written
    """
    try:
        directory = _data_dir(data_dir)
    except OSError as e:
        raise VaultDataWriteFailed(f"could not create data directory: {e}") from e

    # Both documents are encoded before either file is replaced
    auth_payload = _serialize(AUTH_FILE, auth)
    vault_payload = _serialize(VAULT_FILE, vault)

    _replace_file(directory, AUTH_FILE, auth_payload)
    _replace_file(directory, VAULT_FILE, vault_payload)

    logger.info(f"Saved session and vault ({len(vault.ciphers)} entries) to {directory}")
    return directory


def read_app_data(data_dir: Optional[Path] = None) -> AppData:
    """
    Restore a cached session and vault snapshot.

    The restored session has no cipher suite; call ``AppData.unlock()``
    with the master password before decrypting anything.

    Args:
        data_dir: Directory override (default from settings or platform)

    Returns:
        AppData

    Raises:
        VaultDataReadFailed: If the directory or either file cannot be read
    """
    try:
        directory = _data_dir(data_dir)
    except OSError as e:
        raise VaultDataReadFailed(f"could not resolve data directory: {e}") from e

    auth = read_data_from(directory, AUTH_FILE, AuthData)
    vault = read_data_from(directory, VAULT_FILE, VaultData)

    logger.debug(f"Loaded cached session and vault from {directory}")
    return AppData(auth=auth, vault=vault)


def clear_app_data(data_dir: Optional[Path] = None) -> int:
    """
    Delete the cached session and vault.

    Args:
        data_dir: Directory override (default from settings or platform)

    Returns:
        Number of files removed

    Raises:
        VaultDataWriteFailed: If a file exists but cannot be removed
    """
    try:
        directory = _data_dir(data_dir)
    except OSError as e:
        raise VaultDataWriteFailed(f"could not resolve data directory: {e}") from e

    removed = 0
    for filename in CACHE_FILES:
        path = directory / filename
        try:
            path.unlink()
            removed += 1
        except FileNotFoundError:
            continue
        except OSError as e:
            raise VaultDataWriteFailed(f"{path}: {e}") from e

    return removed
