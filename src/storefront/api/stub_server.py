"""FastAPI stub of the storefront backend, served from a FakeBackend.

Speaks the real wire contract (camelCase JSON inside a ``{success, data}``
envelope) so the HTTP adapter can be exercised end to end without the real
service.

Usage:
    uvicorn devserver:app --app-dir src --port 4000
"""

from fastapi import APIRouter, FastAPI, Header, Request
from fastapi.responses import JSONResponse

from storefront.api.fake_backend import FakeBackend
from storefront.api.schemas import (
    CheckoutRequest,
    ErrorBody,
    VerifyPaymentRequest,
    WalletConnectRequest,
)
from storefront.errors import ApiError, AuthError, ForbiddenError, NotFoundError


def _ok(model) -> dict:
    data = model.to_wire() if hasattr(model, "to_wire") else model
    return {"success": True, "data": data}


def _status_code_for(exc: ApiError) -> int:
    if isinstance(exc, AuthError):
        return 401
    if isinstance(exc, ForbiddenError):
        return 403
    if isinstance(exc, NotFoundError):
        return 404
    return 400


def create_stub_app(backend: FakeBackend, prefix: str = "/v1") -> FastAPI:
    app = FastAPI(
        title="Storefront Backend Stub",
        description="In-memory stand-in for the storefront checkout and auth API",
    )
    app.state.backend = backend

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        body = ErrorBody(code=exc.code, message=exc.message, details=exc.details)
        return JSONResponse(
            status_code=_status_code_for(exc),
            content={"success": False, "error": body.to_wire()},
        )

    # -----------------------------------------------------------------------
    # Stores & checkout
    # -----------------------------------------------------------------------
    store_router = APIRouter(prefix="/stores", tags=["checkout"])

    @store_router.get("/{slug}")
    async def get_store(slug: str) -> dict:
        return _ok(await backend.get_store_by_slug(slug))

    @store_router.post("/{store_id}/checkout", status_code=201)
    async def create_checkout(store_id: str, body: CheckoutRequest) -> dict:
        return _ok(await backend.create_checkout_session(store_id, body))

    @store_router.post("/{store_id}/checkout/verify")
    async def verify_payment(store_id: str, body: VerifyPaymentRequest) -> dict:
        return _ok(await backend.verify_payment(store_id, body.order_id, body.signature))

    @store_router.get("/{store_id}/checkout/{order_id}/status")
    async def checkout_status(store_id: str, order_id: str) -> dict:
        return _ok(await backend.get_checkout_status(store_id, order_id))

    # -----------------------------------------------------------------------
    # Auth
    # -----------------------------------------------------------------------
    auth_router = APIRouter(prefix="/auth", tags=["auth"])

    @auth_router.post("/wallet/connect")
    async def connect_wallet(body: WalletConnectRequest) -> dict:
        return _ok(await backend.connect_wallet(body.wallet_address, body.signature, body.message))

    @auth_router.get("/verify")
    async def verify_token(authorization: str = Header(default="")) -> dict:
        backend.current_token = authorization.removeprefix("Bearer ").strip() or None
        return _ok(await backend.verify_token())

    app.include_router(store_router, prefix=prefix)
    app.include_router(auth_router, prefix=prefix)

    @app.get(f"{prefix}/health")
    async def health() -> dict:
        return {"success": True, "data": {"status": "ok"}}

    return app
