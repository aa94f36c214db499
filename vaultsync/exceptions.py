"""Errors raised by the authentication and synchronization pipeline.

One kind per pipeline stage. Each carries a free-text cause in ``error``;
transport failures, bad statuses and malformed bodies of the same stage
share a kind and differ only in that text.
"""


class ApiError(Exception):
    """Base exception for vault service and cache operations."""

    template = "{error}"

    def __init__(self, error: str):
        self.error = error
        super().__init__(self.template.format(**vars(self)))


class PreloginFailed(ApiError):
    """Raised when KDF parameters cannot be discovered."""

    template = "prelogin failed: {error}"


class LoginFailed(ApiError):
    """Raised when the token exchange fails."""

    template = "authentication failed: {error}"


class RequestFailed(ApiError):
    """Raised when an authenticated API request fails."""

    template = "failed to retrieve {endpoint}: {error}"

    def __init__(self, endpoint: str, error: str):
        self.endpoint = endpoint
        super().__init__(error)


class VaultDataWriteFailed(ApiError):
    """Raised when the local cache cannot be written."""

    template = "failed to write sync data: {error}"


class VaultDataReadFailed(ApiError):
    """Raised when the local cache cannot be read."""

    template = "failed to read sync data: {error}"
