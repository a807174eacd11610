"""HTTP adapter for the storefront backend, built on ``httpx.AsyncClient``.

Every response is unwrapped from the ``{success, data, error}`` envelope and
every failure is mapped onto the ``ApiError`` family, so callers never see a
raw ``httpx`` or pydantic exception. A body that is missing, not JSON, or does
not match the expected schema raises ``InvalidResponseError``.
"""

from collections.abc import Callable
from typing import Any, TypeVar

import httpx
import pydantic
import structlog

from storefront.api.port import StorefrontBackend
from storefront.api.schemas import (
    AuthResult,
    CheckoutRequest,
    CheckoutSession,
    Envelope,
    PaymentStatus,
    PaymentVerification,
    StoreSummary,
    TokenVerification,
    VerifyPaymentRequest,
    WalletConnectRequest,
)
from storefront.errors import (
    ApiError,
    AuthError,
    ForbiddenError,
    InvalidResponseError,
    NetworkError,
    NotFoundError,
    RequestTimeoutError,
    ServerError,
)

logger = structlog.get_logger(__name__)

Model = TypeVar("Model", bound=pydantic.BaseModel)


class HttpBackend(StorefrontBackend):
    """Production backend adapter."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        token_provider: Callable[[], str | None] | None = None,
        on_unauthorized: Callable[[], None] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self._token_provider = token_provider
        self.on_unauthorized = on_unauthorized
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpBackend":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # -------------------------------------------------------------------
    # Endpoints
    # -------------------------------------------------------------------
    async def get_store_by_slug(self, slug: str) -> StoreSummary:
        data = await self._request("GET", f"/stores/{slug}")
        return _parse(StoreSummary, data)

    async def create_checkout_session(self, store_id: str, request: CheckoutRequest) -> CheckoutSession:
        data = await self._request("POST", f"/stores/{store_id}/checkout", json=request.to_wire())
        return _parse(CheckoutSession, data)

    async def get_checkout_status(self, store_id: str, order_id: str) -> PaymentStatus:
        data = await self._request("GET", f"/stores/{store_id}/checkout/{order_id}/status")
        return _parse(PaymentStatus, data)

    async def verify_payment(self, store_id: str, order_id: str, signature: str | None = None) -> PaymentVerification:
        body = VerifyPaymentRequest(order_id=order_id, signature=signature)
        data = await self._request("POST", f"/stores/{store_id}/checkout/verify", json=body.to_wire())
        return _parse(PaymentVerification, data)

    async def connect_wallet(self, wallet_address: str, signature: str, message: str) -> AuthResult:
        body = WalletConnectRequest(wallet_address=wallet_address, signature=signature, message=message)
        data = await self._request("POST", "/auth/wallet/connect", json=body.to_wire())
        return _parse(AuthResult, data)

    async def verify_token(self) -> TokenVerification:
        data = await self._request("GET", "/auth/verify")
        return _parse(TokenVerification, data)

    async def check_health(self) -> dict:
        """Check backend availability. Never raises."""
        try:
            data = await self._request("GET", "/health")
        except ApiError as exc:
            logger.error("API health check failed", code=exc.code, error=exc.message)
            return {"available": False, "error": exc.message}
        return {"available": True, "data": data}

    # -------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------
    async def _request(self, method: str, path: str, json: dict | None = None, params: dict | None = None) -> Any:
        headers = {}
        token = self._token_provider() if self._token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"

        logger.debug("API request", method=method, path=path)
        try:
            response = await self._client.request(method, path, json=json, params=params, headers=headers)
        except httpx.TimeoutException as exc:
            raise RequestTimeoutError("Request timed out. Please try again.") from exc
        except httpx.ConnectError as exc:
            raise NetworkError("Cannot connect to backend server. Please ensure your backend is running.") from exc
        except httpx.HTTPError as exc:
            raise NetworkError("Failed to connect to server. Please check your connection.") from exc

        logger.debug("API response", method=method, path=path, status_code=response.status_code)

        body = _json_or_none(response)
        if response.is_error:
            self._raise_for_status(response.status_code, body)

        if isinstance(body, dict) and "success" in body:
            envelope = _parse(Envelope, body)
            if not envelope.success:
                error = envelope.error
                raise ApiError(
                    error.message if error else "An error occurred",
                    code=error.code if error else "API_ERROR",
                    details=error.details if error else None,
                )
            return envelope.data

        return body

    def _raise_for_status(self, status_code: int, body: Any) -> None:
        if status_code == 401:
            if self.on_unauthorized is not None:
                self.on_unauthorized()
            raise AuthError("Authentication required. Please connect your wallet.")
        if status_code == 403:
            raise ForbiddenError("Access denied. You don't have permission to perform this action.")
        if status_code == 404:
            raise NotFoundError("The requested resource was not found.")
        if status_code >= 500:
            raise ServerError("Server error. Please try again later.")

        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            error = body["error"]
            raise ApiError(
                error.get("message") or "An error occurred",
                code=error.get("code") or "API_ERROR",
                details=error.get("details"),
            )
        raise ApiError(f"Request failed with status {status_code}", code="API_ERROR")


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _parse(model: type[Model], data: Any) -> Model:
    """Validate a response payload, mapping contract mismatches onto ``InvalidResponseError``."""
    if data is None:
        raise InvalidResponseError(f"Empty or unreadable response for {model.__name__}")
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as exc:
        logger.warning("Response did not match schema", model=model.__name__, errors=exc.error_count())
        raise InvalidResponseError(
            f"Unexpected response for {model.__name__}",
            details=exc.errors(include_url=False, include_context=False, include_input=False),
        ) from exc
