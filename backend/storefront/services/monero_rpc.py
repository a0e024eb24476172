"""
monero_rpc.py - monero-wallet-rpc JSON-RPC client.
Plain request/response wrapper: no retries, no idempotency key on transfer.
"""
import logging
from decimal import Decimal, ROUND_DOWN
from typing import Optional

import httpx

from storefront.config import settings

logger = logging.getLogger(__name__)

ATOMIC_UNITS_PER_XMR = Decimal(10 ** 12)


class MoneroRPCError(Exception):
    """The daemon answered with a JSON-RPC error object."""

    def __init__(self, code: int, message: str):
        super().__init__(f"RPC error {code}: {message}")
        self.code = code
        self.message = message


def xmr_to_atomic(amount: Decimal) -> int:
    return int((Decimal(amount) * ATOMIC_UNITS_PER_XMR).to_integral_value(rounding=ROUND_DOWN))


def atomic_to_xmr(atomic: int) -> Decimal:
    return Decimal(atomic) / ATOMIC_UNITS_PER_XMR


class MoneroWalletRPC:
    def __init__(self, url: str, username: str = "", password: str = "", timeout: float = 30.0):
        self.url = url.rstrip("/") + "/json_rpc"
        self.auth = httpx.BasicAuth(username, password) if username else None
        self.timeout = timeout

    async def call(self, method: str, params: Optional[dict] = None) -> dict:
        async with httpx.AsyncClient(timeout=self.timeout, auth=self.auth) as client:
            resp = await client.post(self.url, json={
                "jsonrpc": "2.0", "id": "0", "method": method,
                "params": params or {},
            })
            resp.raise_for_status()
            data = resp.json()
        if "error" in data:
            err = data["error"]
            raise MoneroRPCError(err.get("code", -1), err.get("message", "unknown error"))
        return data.get("result", {})

    async def create_wallet(self, filename: str, password: str, language: str = "English") -> dict:
        return await self.call("create_wallet", {
            "filename": filename, "password": password, "language": language,
        })

    async def open_wallet(self, filename: str, password: str) -> dict:
        return await self.call("open_wallet", {"filename": filename, "password": password})

    async def get_address(self, account_index: int = 0) -> str:
        result = await self.call("get_address", {"account_index": account_index})
        return result["address"]

    async def create_address(self, account_index: int = 0, label: str = "") -> dict:
        """Returns {"address": ..., "address_index": ...}."""
        return await self.call("create_address", {"account_index": account_index, "label": label})

    async def query_key(self, key_type: str) -> str:
        """key_type: "mnemonic", "view_key" or "spend_key"."""
        result = await self.call("query_key", {"key_type": key_type})
        return result["key"]

    async def get_balance(self, account_index: int = 0) -> dict:
        result = await self.call("get_balance", {"account_index": account_index})
        return {
            "balance_xmr": atomic_to_xmr(result.get("balance", 0)),
            "unlocked_balance_xmr": atomic_to_xmr(result.get("unlocked_balance", 0)),
        }

    async def validate_address(self, address: str) -> bool:
        result = await self.call("validate_address", {
            "address": address, "any_net_type": False, "allow_openalias": False,
        })
        return bool(result.get("valid"))

    async def transfer(
        self,
        address: str,
        amount_xmr: Decimal,
        priority: int = 0,
        ring_size: int = 16,
        account_index: int = 0,
    ) -> dict:
        """Send amount_xmr to address. Returns the daemon's tx_hash, fee and amount."""
        return await self.call("transfer", {
            "destinations": [{"amount": xmr_to_atomic(amount_xmr), "address": address}],
            "account_index": account_index,
            "priority": priority,
            "ring_size": ring_size,
            "get_tx_key": True,
        })


def get_wallet_rpc() -> Optional[MoneroWalletRPC]:
    """Configured client, or None when MONERO_RPC_URL is unset."""
    if not settings.monero_rpc_enabled:
        return None
    return MoneroWalletRPC(
        settings.MONERO_RPC_URL,
        settings.MONERO_RPC_USERNAME,
        settings.MONERO_RPC_PASSWORD,
        settings.MONERO_RPC_TIMEOUT,
    )
