"""Deterministic fake signer for development and testing.

Signatures are a hex SHA-256 digest of address and message, so the same
inputs always produce the same signature. Each wallet step can be configured
to fail with a given wallet error code.
"""

import hashlib

from storefront.wallet.signer import Signer, SignerAccount, SignerRequestError

DEFAULT_ADDRESS = "9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVFin"


class FakeSigner(Signer):
    def __init__(self, address: str = DEFAULT_ADDRESS, available: bool = True) -> None:
        self.address = address
        self.available = available
        self.available_after_checks: int = 0
        self.connected: bool = False
        self.connect_error: SignerRequestError | None = None
        self.sign_error: SignerRequestError | None = None
        self.disconnect_error: Exception | None = None
        self.calls: list[dict] = []
        self._checks = 0

    def is_available(self) -> bool:
        self._checks += 1
        if self.available_after_checks and self._checks > self.available_after_checks:
            self.available = True
        return self.available

    async def connect(self) -> SignerAccount:
        self.calls.append({"method": "connect"})
        if self.connect_error is not None:
            raise self.connect_error
        self.connected = True
        return SignerAccount(address=self.address, public_key=self.address)

    async def sign_message(self, message: bytes) -> str:
        self.calls.append({"method": "sign_message", "message": message})
        if self.sign_error is not None:
            raise self.sign_error
        return hashlib.sha256(self.address.encode() + message).hexdigest()

    async def disconnect(self) -> None:
        self.calls.append({"method": "disconnect"})
        if self.disconnect_error is not None:
            raise self.disconnect_error
        self.connected = False
