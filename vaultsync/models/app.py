"""Session and vault pairing handed to consumers."""

from dataclasses import dataclass

from ..crypto.suite import CipherSuite
from .auth import AuthData
from .vault import VaultData


@dataclass
class AppData:
    """The unit of local persistence: a session and its vault snapshot."""

    auth: AuthData
    vault: VaultData

    @property
    def email(self) -> str:
        """Account email recorded in the vault profile."""
        return self.vault.profile.email

    def unlock(self, password: str) -> CipherSuite:
        """
        Rebuild the cipher suite after a cache load.

        Derives the master key from the profile email, the password and the
        cached KDF iteration count, then decrypts the account key.

        Args:
            password: Master password

        Returns:
            The unlocked CipherSuite, also attached to ``auth.cipher``

        Raises:
            DecryptionError: If the password is wrong
        """
        cipher = CipherSuite.from_credentials(self.email, password, self.auth.kdf_iterations)
        cipher.unlock(self.vault.profile.key)
        self.auth.cipher = cipher
        return cipher
