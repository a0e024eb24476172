"""
Tests for the monero-wallet-rpc client.
All network calls are mocked; no real HTTP requests are made.
"""
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from storefront.services.monero_rpc import (
    MoneroWalletRPC, MoneroRPCError, xmr_to_atomic, atomic_to_xmr,
)


def _make_response(json_data: dict) -> MagicMock:
    resp = MagicMock()
    resp.status_code = 200
    resp.json.return_value = json_data
    resp.raise_for_status = MagicMock()
    return resp


def _patched_client(mock_client_cls, mock_post):
    mock_client = AsyncMock()
    mock_client.post = mock_post
    mock_client_cls.return_value.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client_cls.return_value.__aexit__ = AsyncMock(return_value=False)


def test_xmr_atomic_conversion():
    assert xmr_to_atomic(Decimal("1")) == 1_000_000_000_000
    assert xmr_to_atomic(Decimal("0.646666666666")) == 646_666_666_666
    assert atomic_to_xmr(1_500_000_000_000) == Decimal("1.5")


def test_xmr_to_atomic_truncates_sub_atomic_amounts():
    assert xmr_to_atomic(Decimal("0.0000000000019")) == 1


@pytest.mark.asyncio
async def test_get_address_posts_json_rpc_request():
    mock_post = AsyncMock(return_value=_make_response(
        {"jsonrpc": "2.0", "id": "0", "result": {"address": "44abc", "addresses": []}}
    ))
    with patch("httpx.AsyncClient") as mock_client_cls:
        _patched_client(mock_client_cls, mock_post)
        rpc = MoneroWalletRPC("http://wallet:18083/", "rpcuser", "rpcpass")
        address = await rpc.get_address(0)

    assert address == "44abc"
    url = mock_post.call_args[0][0]
    payload = mock_post.call_args[1]["json"]
    assert url == "http://wallet:18083/json_rpc"
    assert payload["jsonrpc"] == "2.0"
    assert payload["method"] == "get_address"
    assert payload["params"] == {"account_index": 0}
    assert mock_client_cls.call_args[1]["auth"] is not None


@pytest.mark.asyncio
async def test_rpc_error_raises_monero_rpc_error():
    mock_post = AsyncMock(return_value=_make_response(
        {"jsonrpc": "2.0", "id": "0", "error": {"code": -21, "message": "Wallet already exists."}}
    ))
    with patch("httpx.AsyncClient") as mock_client_cls:
        _patched_client(mock_client_cls, mock_post)
        rpc = MoneroWalletRPC("http://wallet:18083")
        with pytest.raises(MoneroRPCError) as exc_info:
            await rpc.create_wallet("user_1", "pw")

    assert exc_info.value.code == -21
    assert exc_info.value.message == "Wallet already exists."


@pytest.mark.asyncio
async def test_transfer_sends_atomic_units_and_ring_size():
    mock_post = AsyncMock(return_value=_make_response(
        {"result": {"tx_hash": "ff" * 32, "fee": 30_000_000, "amount": 500_000_000_000}}
    ))
    with patch("httpx.AsyncClient") as mock_client_cls:
        _patched_client(mock_client_cls, mock_post)
        rpc = MoneroWalletRPC("http://wallet:18083")
        result = await rpc.transfer("48dest", Decimal("0.5"), priority=1, ring_size=16)

    assert result["tx_hash"] == "ff" * 32
    params = mock_post.call_args[1]["json"]["params"]
    assert params["destinations"] == [{"amount": 500_000_000_000, "address": "48dest"}]
    assert params["priority"] == 1
    assert params["ring_size"] == 16


@pytest.mark.asyncio
async def test_get_balance_converts_to_xmr():
    mock_post = AsyncMock(return_value=_make_response(
        {"result": {"balance": 2_000_000_000_000, "unlocked_balance": 500_000_000_000}}
    ))
    with patch("httpx.AsyncClient") as mock_client_cls:
        _patched_client(mock_client_cls, mock_post)
        balance = await MoneroWalletRPC("http://wallet:18083").get_balance()

    assert balance == {"balance_xmr": Decimal(2), "unlocked_balance_xmr": Decimal("0.5")}


@pytest.mark.asyncio
async def test_validate_address_returns_flag():
    mock_post = AsyncMock(return_value=_make_response({"result": {"valid": False}}))
    with patch("httpx.AsyncClient") as mock_client_cls:
        _patched_client(mock_client_cls, mock_post)
        assert await MoneroWalletRPC("http://wallet:18083").validate_address("nope") is False


@pytest.mark.asyncio
async def test_query_key_returns_key():
    mock_post = AsyncMock(return_value=_make_response({"result": {"key": "0a" * 32}}))
    with patch("httpx.AsyncClient") as mock_client_cls:
        _patched_client(mock_client_cls, mock_post)
        key = await MoneroWalletRPC("http://wallet:18083").query_key("view_key")

    assert key == "0a" * 32
    assert mock_post.call_args[1]["json"]["params"] == {"key_type": "view_key"}
