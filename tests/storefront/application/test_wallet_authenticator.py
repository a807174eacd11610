import json

import pytest
from storefront.errors import (
    ConnectionPending,
    ConnectionRejected,
    NetworkError,
    SignatureRejected,
    SignerLocked,
    SignerNotFound,
    WalletConnectionFailed,
)
from storefront.wallet.authenticator import (
    AUTH_TOKEN_KEY,
    SESSION_KEYS,
    USER_DATA_KEY,
    WALLET_ADDRESS_KEY,
    WALLET_CONNECTED_KEY,
    WalletAuthenticator,
)
from storefront.wallet.fake_signer import DEFAULT_ADDRESS
from storefront.wallet.signer import INTERNAL_ERROR, REQUEST_PENDING, USER_REJECTED, SignerRequestError


@pytest.fixture
def fixed_wallet(signer, backend, storage):
    return WalletAuthenticator(signer, backend, storage, detect_delay=0, clock=lambda: 1_700_000_000.0)


class TestConnect:
    @pytest.mark.asyncio
    async def test_handshake_persists_the_session(self, fixed_wallet, backend, storage):
        session = await fixed_wallet.connect()

        assert session.address == DEFAULT_ADDRESS
        assert storage.get_item(WALLET_ADDRESS_KEY) == DEFAULT_ADDRESS
        assert storage.get_item(WALLET_CONNECTED_KEY) == "true"
        assert storage.get_item(AUTH_TOKEN_KEY) == session.auth_token
        assert json.loads(storage.get_item(USER_DATA_KEY))["walletAddress"] == DEFAULT_ADDRESS
        assert fixed_wallet.session == session

    @pytest.mark.asyncio
    async def test_challenge_message(self, fixed_wallet, backend, signer):
        await fixed_wallet.connect()

        call = backend.calls_to("connect_wallet")[0]
        assert call["message"] == "Sign in to SolStore\nTimestamp: 1700000000000"
        assert signer.calls[1]["message"] == call["message"].encode("utf-8")

    @pytest.mark.asyncio
    async def test_late_injected_signer_is_detected(self, fixed_wallet, signer):
        signer.available = False
        signer.available_after_checks = 1
        assert await fixed_wallet.detect() is True

    @pytest.mark.asyncio
    async def test_missing_signer(self, fixed_wallet, signer):
        signer.available = False
        with pytest.raises(SignerNotFound) as exc:
            await fixed_wallet.connect()
        assert "https://phantom.app/" in exc.value.message

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "code, error_class",
        [
            (USER_REJECTED, ConnectionRejected),
            (REQUEST_PENDING, ConnectionPending),
            (INTERNAL_ERROR, SignerLocked),
            (None, WalletConnectionFailed),
        ],
    )
    async def test_connect_errors_are_mapped(self, fixed_wallet, signer, storage, code, error_class):
        signer.connect_error = SignerRequestError("wallet said no", code=code)
        with pytest.raises(error_class):
            await fixed_wallet.connect()
        assert storage.get_item(AUTH_TOKEN_KEY) is None

    @pytest.mark.asyncio
    async def test_rejected_signature(self, fixed_wallet, signer, backend):
        signer.sign_error = SignerRequestError("User rejected the request.")
        with pytest.raises(SignatureRejected):
            await fixed_wallet.connect()
        assert backend.calls_to("connect_wallet") == []

    @pytest.mark.asyncio
    async def test_invalid_address(self, signer, backend, storage):
        signer.address = "not-base58-0OIl"
        wallet = WalletAuthenticator(signer, backend, storage, detect_delay=0)
        with pytest.raises(WalletConnectionFailed):
            await wallet.connect()

    @pytest.mark.asyncio
    async def test_backend_failure_persists_nothing(self, fixed_wallet, backend, storage):
        backend.fail_next("connect_wallet", NetworkError("down"))
        with pytest.raises(NetworkError):
            await fixed_wallet.connect()
        assert not fixed_wallet.is_connected
        assert storage.get_item(WALLET_ADDRESS_KEY) is None


class TestDisconnect:
    @pytest.mark.asyncio
    async def test_clears_every_session_key(self, fixed_wallet, storage):
        await fixed_wallet.connect()
        await fixed_wallet.disconnect()
        assert all(storage.get_item(key) is None for key in SESSION_KEYS)
        assert fixed_wallet.session is None

    @pytest.mark.asyncio
    async def test_signer_failure_still_clears_session(self, fixed_wallet, signer, storage):
        await fixed_wallet.connect()
        signer.disconnect_error = RuntimeError("extension crashed")
        await fixed_wallet.disconnect()
        assert storage.get_item(AUTH_TOKEN_KEY) is None

    @pytest.mark.asyncio
    async def test_disconnect_twice(self, fixed_wallet):
        await fixed_wallet.disconnect()
        await fixed_wallet.disconnect()
        assert not fixed_wallet.is_connected

    def test_invalidate_token_keeps_the_address(self, wallet, signed_in):
        wallet.invalidate_token()
        assert wallet.auth_token is None
        assert wallet.address == DEFAULT_ADDRESS
        assert wallet.session is None
