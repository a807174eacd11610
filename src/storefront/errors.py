"""Error taxonomy for the storefront client.

Input validation (empty cart, invalid email, wallet not connected) reuses
protean's ``ValidationError``. Everything else raised by this package derives
from ``StorefrontError``.
"""


class StorefrontError(Exception):
    """Base class for storefront client errors."""


# ---------------------------------------------------------------------------
# Backend API errors
# ---------------------------------------------------------------------------
class ApiError(StorefrontError):
    """An error reported by, or while talking to, the storefront backend."""

    code = "API_ERROR"

    def __init__(self, message: str, code: str | None = None, details=None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class NetworkError(ApiError):
    code = "NETWORK_ERROR"


class RequestTimeoutError(ApiError):
    code = "TIMEOUT_ERROR"


class AuthError(ApiError):
    """The backend rejected the session token (HTTP 401)."""

    code = "UNAUTHORIZED"


class ForbiddenError(ApiError):
    code = "FORBIDDEN"


class NotFoundError(ApiError):
    code = "NOT_FOUND"


class ServerError(ApiError):
    code = "SERVER_ERROR"


class InvalidResponseError(ApiError):
    """The backend answered, but the body was missing or did not match the contract."""

    code = "INVALID_RESPONSE"


# ---------------------------------------------------------------------------
# Checkout errors
# ---------------------------------------------------------------------------
class ExpiryError(StorefrontError):
    """Raised locally when a checkout session outlives its expiry instant."""

    def __init__(self, message: str = "Payment session expired. Please start a new checkout.") -> None:
        super().__init__(message)
        self.message = message


# ---------------------------------------------------------------------------
# Wallet errors
# ---------------------------------------------------------------------------
class WalletError(StorefrontError):
    """A wallet step failed; the connect step can be retried."""

    default_message = "Failed to connect to wallet. Please try again."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class SignerNotFound(WalletError):
    default_message = "Phantom wallet not detected. Please install Phantom wallet from https://phantom.app/"


class ConnectionRejected(WalletError):
    default_message = "Connection cancelled. Please try again and approve the connection request."


class ConnectionPending(WalletError):
    default_message = "Connection request already pending. Please check your wallet."


class SignerLocked(WalletError):
    default_message = "Wallet is locked. Please unlock your Phantom wallet and try again."


class SignatureRejected(WalletError):
    default_message = "Signature cancelled. Please try again and approve the signature request."


class WalletConnectionFailed(WalletError):
    pass
