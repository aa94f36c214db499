"""Authentication data models."""

from dataclasses import dataclass
from typing import Optional

from ..crypto.suite import CipherSuite
from .wire import WireModel, wire_field


@dataclass
class PreloginResponse(WireModel):
    """Key-derivation parameters announced for an account."""

    kdf: int = wire_field("Kdf")
    kdf_iterations: int = wire_field("KdfIterations")


@dataclass
class LoginResponse(WireModel):
    """Bearer token granted by the identity service."""

    access_token: str = wire_field()
    expires_in: int = wire_field()
    token_type: str = wire_field()


@dataclass
class AuthData(WireModel):
    """An authenticated session.

    The cipher suite is held in memory only: it is never written to the
    cache and does not take part in equality. A session read back from the
    cache has ``cipher=None`` until it is unlocked with the password again.
    """

    access_token: str = wire_field()
    expires_in: int = wire_field()
    token_type: str = wire_field()
    kdf: int = wire_field()
    kdf_iterations: int = wire_field()
    cipher: Optional[CipherSuite] = wire_field(default=None, persist=False, compare=False, repr=False)

    @property
    def authorization_header(self) -> str:
        """Value for the Authorization header of API requests."""
        return f"{self.token_type} {self.access_token}"

    @property
    def is_unlocked(self) -> bool:
        """Check if derived key material is available."""
        return self.cipher is not None

    def __repr__(self) -> str:
        return (
            f"AuthData(token_type={self.token_type!r}, expires_in={self.expires_in}, "
            f"kdf={self.kdf}, kdf_iterations={self.kdf_iterations}, unlocked={self.is_unlocked})"
        )
