"""Per-user Monero deposit addresses."""
import logging
import secrets
from typing import Optional, Tuple

import httpx
from cryptography.fernet import InvalidToken
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config import settings
from storefront.core.crypto import encrypt_secret, decrypt_secret
from storefront.models.address import UserAddress
from storefront.services.monero_rpc import MoneroWalletRPC, MoneroRPCError, get_wallet_rpc

logger = logging.getLogger(__name__)

PENDING_ADDRESS = "pending"
MONERO_ADDRESS_PREFIX = "4"


def generate_simulated_address() -> dict:
    """Random address-shaped string plus random keys. Not a valid Monero address."""
    return {
        "address": MONERO_ADDRESS_PREFIX + secrets.token_hex(64)[:94],
        "spend_key": secrets.token_hex(32),
        "view_key": secrets.token_hex(32),
    }


async def _create_with_rpc(rpc: MoneroWalletRPC, user_id: str, previous: dict) -> Tuple[str, dict]:
    if settings.MONERO_RPC_WALLET_FILE:
        await rpc.open_wallet(settings.MONERO_RPC_WALLET_FILE, settings.MONERO_RPC_WALLET_PASSWORD)
        result = await rpc.create_address(account_index=0, label=f"user:{user_id}")
        return result["address"], {
            "wallet_filename": settings.MONERO_RPC_WALLET_FILE,
            "account_index": 0,
            "address_index": result.get("address_index"),
        }

    filename = previous.get("wallet_filename") or f"user_{user_id}"
    password = previous.get("wallet_password") or secrets.token_urlsafe(24)
    try:
        await rpc.create_wallet(filename, password)
    except MoneroRPCError as e:
        # Usually "Cannot create wallet. Already exists."
        logger.info("[Monero] create_wallet %s failed (%s), opening instead", filename, e.message)
        await rpc.open_wallet(filename, password)

    address = await rpc.get_address(0)
    return address, {
        "wallet_filename": filename,
        "wallet_password": password,
        "view_key": await rpc.query_key("view_key"),
        "spend_key": await rpc.query_key("spend_key"),
    }


def _previous_secret(row: Optional[UserAddress]) -> dict:
    if row is None or not row.private_key_encrypted:
        return {}
    try:
        return decrypt_secret(row.private_key_encrypted)
    except InvalidToken:
        logger.warning("[Monero] could not decrypt stored key material for user %s", row.user_id)
        return {}


async def get_user_address(db: AsyncSession, user_id: str, currency: str = "XMR") -> Optional[UserAddress]:
    return await db.scalar(
        select(UserAddress).where(UserAddress.user_id == user_id, UserAddress.currency == currency)
    )


async def get_or_create_address(db: AsyncSession, user_id: str) -> Tuple[UserAddress, bool]:
    """Return (row, created). An existing non-pending address is returned untouched."""
    existing = await get_user_address(db, user_id)
    if existing and existing.address != PENDING_ADDRESS:
        return existing, False

    address: Optional[str] = None
    secret: dict = {}
    simulated = True

    rpc = get_wallet_rpc() if settings.MONERO_ADDRESS_MODE == "rpc" else None
    if rpc is not None:
        try:
            address, secret = await _create_with_rpc(rpc, user_id, _previous_secret(existing))
            simulated = False
        except (httpx.HTTPError, MoneroRPCError, KeyError) as e:
            logger.error("[Monero] wallet daemon failed for user %s, falling back to simulated address: %s",
                         user_id, e)

    if address is None:
        generated = generate_simulated_address()
        address = generated.pop("address")
        secret = generated

    if existing:
        row = existing
        row.address = address
        row.private_key_encrypted = encrypt_secret(secret)
        row.is_simulated = simulated
    else:
        row = UserAddress(
            user_id=user_id,
            currency="XMR",
            address=address,
            private_key_encrypted=encrypt_secret(secret),
            is_simulated=simulated,
        )
        db.add(row)

    try:
        await db.commit()
    except IntegrityError:
        # Another request for the same user inserted first
        await db.rollback()
        winner = await get_user_address(db, user_id)
        if winner is None:
            raise
        return winner, False

    logger.info("[Monero] address for user %s stored (simulated=%s)", user_id, simulated)
    return row, True
