"""Wallet sign-in: bridges a Signer to a backend-issued session token.

Flow:
    1. Detect the signer (wallets are injected late, so check twice)
    2. connect() → account address
    3. Build the challenge "Sign in to SolStore\\nTimestamp: <ms>"
    4. sign_message(challenge) → signature
    5. POST /auth/wallet/connect → {token, user}
    6. Persist token, address and user in client storage

Every wallet failure is mapped to a specific ``WalletError`` subclass whose
message tells the user what to do next.
"""

import asyncio
import json
import time
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from storefront.api.port import StorefrontBackend
from storefront.api.schemas import AuthResult
from storefront.errors import (
    ConnectionPending,
    ConnectionRejected,
    SignatureRejected,
    SignerLocked,
    SignerNotFound,
    WalletConnectionFailed,
    WalletError,
)
from storefront.storage.port import KeyValueStorage
from storefront.wallet.address import wallet_address_error
from storefront.wallet.signer import (
    INTERNAL_ERROR,
    REQUEST_PENDING,
    Signer,
    SignerAccount,
    SignerRequestError,
)

logger = structlog.get_logger(__name__)

AUTH_TOKEN_KEY = "auth_token"
WALLET_ADDRESS_KEY = "wallet_address"
WALLET_PUBLIC_KEY_KEY = "wallet_public_key"
WALLET_CONNECTED_KEY = "wallet_connected"
USER_DATA_KEY = "user_data"

SESSION_KEYS = (
    WALLET_ADDRESS_KEY,
    WALLET_CONNECTED_KEY,
    WALLET_PUBLIC_KEY_KEY,
    AUTH_TOKEN_KEY,
    USER_DATA_KEY,
)

DEFAULT_MESSAGE_PREFIX = "Sign in to SolStore"


@dataclass(frozen=True)
class WalletSession:
    address: str
    auth_token: str
    public_key: str


class WalletAuthenticator:
    def __init__(
        self,
        signer: Signer,
        backend: StorefrontBackend,
        storage: KeyValueStorage,
        detect_delay: float = 1.0,
        message_prefix: str = DEFAULT_MESSAGE_PREFIX,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._signer = signer
        self._backend = backend
        self._storage = storage
        self._detect_delay = detect_delay
        self._message_prefix = message_prefix
        self._clock = clock

    # -------------------------------------------------------------------
    # Persisted state
    # -------------------------------------------------------------------
    @property
    def is_connected(self) -> bool:
        return self._storage.get_item(WALLET_CONNECTED_KEY) == "true"

    @property
    def address(self) -> str | None:
        return self._storage.get_item(WALLET_ADDRESS_KEY)

    @property
    def auth_token(self) -> str | None:
        return self._storage.get_item(AUTH_TOKEN_KEY)

    @property
    def session(self) -> WalletSession | None:
        address, token = self.address, self.auth_token
        if not (self.is_connected and address and token):
            return None
        return WalletSession(
            address=address,
            auth_token=token,
            public_key=self._storage.get_item(WALLET_PUBLIC_KEY_KEY) or address,
        )

    @property
    def user(self) -> dict | None:
        raw = self._storage.get_item(USER_DATA_KEY)
        return json.loads(raw) if raw else None

    # -------------------------------------------------------------------
    # Handshake
    # -------------------------------------------------------------------
    async def detect(self) -> bool:
        """Check for the signer, waiting once for a late injection."""
        if self._signer.is_available():
            return True

        logger.debug("Waiting for wallet to load", delay=self._detect_delay)
        await asyncio.sleep(self._detect_delay)
        detected = self._signer.is_available()
        logger.debug("Final wallet detection", detected=detected)
        return detected

    async def connect(self) -> WalletSession:
        """Run the full sign-in handshake and persist the resulting session."""
        if not await self.detect():
            raise SignerNotFound()

        account = await self._connect_signer()
        problem = wallet_address_error(account.address)
        if problem is not None:
            raise WalletConnectionFailed(f"{problem}. Please try another wallet account.")

        result = await self.authenticate(account)
        logger.info("Wallet connected", address=account.address, user_id=result.user.id)
        return WalletSession(address=account.address, auth_token=result.token, public_key=account.public_key)

    async def authenticate(self, account: SignerAccount) -> AuthResult:
        message = self.challenge_message()
        signature = await self._sign(message)

        try:
            result = await self._backend.connect_wallet(account.address, signature, message)
        except Exception as exc:
            logger.warning("Backend authentication failed", address=account.address, error=str(exc))
            raise

        self._storage.set_item(WALLET_ADDRESS_KEY, account.address)
        self._storage.set_item(WALLET_CONNECTED_KEY, "true")
        self._storage.set_item(WALLET_PUBLIC_KEY_KEY, account.public_key)
        self._storage.set_item(AUTH_TOKEN_KEY, result.token)
        self._storage.set_item(USER_DATA_KEY, json.dumps(result.user.to_wire()))
        return result

    def challenge_message(self) -> str:
        return f"{self._message_prefix}\nTimestamp: {int(self._clock() * 1000)}"

    async def _connect_signer(self) -> SignerAccount:
        logger.debug("Requesting wallet connection")
        try:
            return await self._signer.connect()
        except SignerRequestError as exc:
            logger.info("Wallet connection failed", code=exc.code, error=exc.message)
            if exc.user_rejected:
                raise ConnectionRejected() from exc
            if exc.code == REQUEST_PENDING:
                raise ConnectionPending() from exc
            if exc.code == INTERNAL_ERROR:
                raise SignerLocked() from exc
            raise WalletConnectionFailed() from exc
        except WalletError:
            raise
        except Exception as exc:
            logger.info("Wallet connection failed", error=str(exc))
            raise WalletConnectionFailed() from exc

    async def _sign(self, message: str) -> str:
        logger.debug("Signing message", message_length=len(message))
        try:
            return await self._signer.sign_message(message.encode("utf-8"))
        except SignerRequestError as exc:
            logger.info("Message signing failed", code=exc.code, error=exc.message)
            if exc.user_rejected:
                raise SignatureRejected() from exc
            if exc.code == INTERNAL_ERROR:
                raise SignerLocked() from exc
            raise WalletConnectionFailed("Failed to sign message with wallet. Please try again.") from exc
        except Exception as exc:
            logger.info("Message signing failed", error=str(exc))
            raise WalletConnectionFailed("Failed to sign message with wallet. Please try again.") from exc

    # -------------------------------------------------------------------
    # Sign-out
    # -------------------------------------------------------------------
    async def disconnect(self) -> None:
        """Disconnect the signer and clear the local session, even if the signer fails."""
        if self._signer.is_available():
            try:
                await self._signer.disconnect()
            except Exception as exc:
                logger.warning("Failed to disconnect wallet", error=str(exc))

        for key in SESSION_KEYS:
            self._storage.remove_item(key)
        logger.info("Wallet session cleared")

    def invalidate_token(self) -> None:
        """Drop the session token after the backend rejected it."""
        self._storage.remove_item(AUTH_TOKEN_KEY)
        self._storage.remove_item(USER_DATA_KEY)
        logger.info("Auth token cleared; wallet must re-authenticate")
