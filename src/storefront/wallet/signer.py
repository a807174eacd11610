"""Signer port (abstract interface).

Abstracts the wallet capability injected by the browser (Phantom and
compatible wallets). Production wiring binds an adapter over the injected
object; tests bind FakeSigner.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

# Error codes reported by injected Solana wallets (EIP-1193 style)
USER_REJECTED = 4001
REQUEST_PENDING = -32002
INTERNAL_ERROR = -32603


@dataclass(frozen=True)
class SignerAccount:
    """Account returned by a successful ``connect``."""

    address: str
    public_key: str


class SignerRequestError(Exception):
    """Raised by a Signer with the wallet's numeric error code, when it has one."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def user_rejected(self) -> bool:
        return self.code == USER_REJECTED or "User rejected" in self.message


class Signer(ABC):
    """Abstract wallet signer."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the wallet is installed and injected."""
        ...

    @abstractmethod
    async def connect(self) -> SignerAccount:
        """Ask the user to connect; returns the account address."""
        ...

    @abstractmethod
    async def sign_message(self, message: bytes) -> str:
        """Ask the user to sign ``message``; returns the encoded signature."""
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Drop the wallet connection."""
        ...
