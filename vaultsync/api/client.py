"""HTTP client for the vault identity and API services.

Wraps the three round trips of a sync: prelogin (KDF parameter discovery),
token exchange, and the full vault fetch. Every call blocks until the
server answers or the transport fails.
"""

import uuid
from typing import Any, Optional

import httpx

from ..config.settings import get_settings
from ..crypto.suite import CipherSuite
from ..exceptions import LoginFailed, PreloginFailed, RequestFailed
from ..models.auth import AuthData, LoginResponse, PreloginResponse
from ..models.vault import VaultData
from ..utils.logging import get_logger

logger = get_logger(__name__)

# Token request constants
GRANT_TYPE = "password"
SCOPE = "api offline_access"
CLIENT_ID = "connector"
DEVICE_TYPE = "3"  # Desktop-class client

_UNSET: Any = object()


def new_device_id() -> str:
    """Generate a fresh device identifier for one login request."""
    return str(uuid.uuid4())


def _cause(error: Exception) -> str:
    """Readable cause for an exception, falling back to its type name."""
    return str(error) or type(error).__name__


def describe_status(response: httpx.Response) -> str:
    """
    Describe an unsuccessful response.

    Includes the server's own error text when the body carries one.

    Args:
        response: Response with a non-success status

    Returns:
        Message such as "HTTP 400 Bad Request: invalid username or password"
    """
    message = f"HTTP {response.status_code} {response.reason_phrase}".rstrip()

    try:
        body = response.json()
    except ValueError:
        return message

    detail = None
    if isinstance(body, dict):
        error_model = body.get("ErrorModel") or body.get("errorModel") or {}
        detail = (
            body.get("error_description")
            or (error_model.get("Message") if isinstance(error_model, dict) else None)
            or body.get("message")
            or body.get("Message")
            or body.get("error")
        )

    return f"{message}: {detail}" if detail else message


class ApiClient:
    """Client for the vault identity and API services."""

    def __init__(
        self,
        identity_url: Optional[str] = None,
        api_url: Optional[str] = None,
        device_name: Optional[str] = None,
        timeout: Optional[float] = _UNSET,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the API client.

        Args:
            identity_url: Identity service base URL (default from settings)
            api_url: API service base URL (default from settings)
            device_name: Device name reported on login (default from settings)
            timeout: Request timeout in seconds, None to block (default from settings)
            http_client: Preconfigured httpx client (e.g. with a mock transport)
        """
        settings = get_settings()

        self.identity_url = (identity_url or settings.identity_url).rstrip("/")
        self.api_url = (api_url or settings.api_url).rstrip("/")
        self.device_name = device_name or settings.device_name
        self.timeout = settings.http_timeout if timeout is _UNSET else timeout

        self._client = http_client or httpx.Client(timeout=self.timeout)

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying connection pool."""
        self._client.close()

    @property
    def prelogin_url(self) -> str:
        return f"{self.identity_url}/accounts/prelogin"

    @property
    def token_url(self) -> str:
        return f"{self.identity_url}/connect/token"

    @property
    def sync_url(self) -> str:
        return f"{self.api_url}/sync"

    def prelogin(self, email: str) -> PreloginResponse:
        """
        Discover the KDF parameters for an account.

        Args:
            email: Account email

        Returns:
            PreloginResponse with KDF algorithm id and iteration count

        Raises:
            ValueError: If email is empty
            PreloginFailed: On transport error, bad status or malformed body
        """
        if not email:
            raise ValueError("email must not be empty")

        logger.debug(f"Prelogin request to {self.prelogin_url}")

        try:
            response = self._client.post(self.prelogin_url, json={"email": email})
        except httpx.HTTPError as e:
            raise PreloginFailed(_cause(e)) from e

        if not response.is_success:
            raise PreloginFailed(describe_status(response))

        try:
            data = PreloginResponse.from_dict(response.json())
        except ValueError as e:
            raise PreloginFailed(_cause(e)) from e

        logger.debug(f"Prelogin returned kdf={data.kdf} iterations={data.kdf_iterations}")
        return data

    def authenticate_with_token(self, email: str, cipher: CipherSuite) -> LoginResponse:
        """
        Exchange the master-key hash for a bearer token.

        A new device identifier is generated for every call.

        Args:
            email: Account email
            cipher: Cipher suite derived from the master password

        Returns:
            LoginResponse with access token, token type and expiry

        Raises:
            LoginFailed: On transport error, bad status or malformed body
        """
        form = {
            "grant_type": GRANT_TYPE,
            "username": email,
            "scope": SCOPE,
            "client_id": CLIENT_ID,
            "deviceType": DEVICE_TYPE,
            "deviceIdentifier": new_device_id(),
            "deviceName": self.device_name,
            "password": cipher.master_key_hash,
        }

        logger.debug(f"Token request to {self.token_url}")

        try:
            response = self._client.post(self.token_url, data=form)
        except httpx.HTTPError as e:
            raise LoginFailed(_cause(e)) from e

        if not response.is_success:
            raise LoginFailed(describe_status(response))

        try:
            data = LoginResponse.from_dict(response.json())
        except ValueError as e:
            raise LoginFailed(_cause(e)) from e

        logger.debug(f"Token granted ({data.token_type}, expires in {data.expires_in}s)")
        return data

    def sync(self, auth: AuthData) -> VaultData:
        """
        Fetch the full vault snapshot.

        Args:
            auth: Authenticated session

        Returns:
            VaultData parsed from the sync document

        Raises:
            RequestFailed: On transport error, bad status or malformed body,
                carrying the sync endpoint URL
        """
        url = self.sync_url
        headers = {"Authorization": auth.authorization_header}

        logger.debug(f"Sync request to {url}")

        try:
            response = self._client.get(url, headers=headers)
        except httpx.HTTPError as e:
            raise RequestFailed(url, _cause(e)) from e

        if not response.is_success:
            raise RequestFailed(url, describe_status(response))

        try:
            vault = VaultData.from_dict(response.json())
        except ValueError as e:
            raise RequestFailed(url, _cause(e)) from e

        logger.info(
            f"Synced vault: {len(vault.ciphers)} entries, {len(vault.folders)} folders"
        )
        return vault
