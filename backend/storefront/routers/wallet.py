import logging
from typing import Optional
import httpx
from cryptography.fernet import InvalidToken
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from storefront.database import get_db
from storefront.core.deps import CurrentUser, get_current_user
from storefront.core.crypto import decrypt_secret
from storefront.models.wallet import WalletBalance
from storefront.models.withdrawal import WithdrawalRequest
from storefront.schemas.wallet import WithdrawalCreate
from storefront.services.addresses import get_or_create_address, get_user_address
from storefront.services.monero_rpc import MoneroRPCError, get_wallet_rpc
from storefront.services.withdrawals import process_withdrawal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/monero", tags=["monero"])


@router.post("/address")
async def generate_address(user: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    """Return the user's XMR deposit address, creating one on first call."""
    logger.info("[Monero] address requested by user %s", user.id)
    row, created = await get_or_create_address(db, user.id)
    return {
        "success": True,
        "address": row.address,
        "message": "Monero address generated successfully" if created else "User already has Monero address",
        "simulated": row.is_simulated,
    }


@router.post("/withdraw")
async def withdraw(
    body: WithdrawalCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await process_withdrawal(
        db, user.id, body.amount_eur, body.currency.upper(), body.destination_address.strip(),
    )
    return {"success": True, **result}


async def _daemon_balance(row) -> Optional[dict]:
    """Balance reported by the user's own wallet file, if it has one."""
    rpc = get_wallet_rpc()
    if rpc is None or row is None or row.is_simulated or not row.private_key_encrypted:
        return None
    try:
        secret = decrypt_secret(row.private_key_encrypted)
    except InvalidToken:
        logger.warning("[Monero] stored key material for user %s is unreadable", row.user_id)
        return None
    if "wallet_password" not in secret:
        return None
    try:
        await rpc.open_wallet(secret["wallet_filename"], secret["wallet_password"])
        balance = await rpc.get_balance(0)
    except (httpx.HTTPError, MoneroRPCError) as e:
        logger.warning("[Monero] balance query failed for user %s: %s", row.user_id, e)
        return None
    return {k: float(v) for k, v in balance.items()}


@router.get("/balance")
async def get_balance(user: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    balance = await db.get(WalletBalance, user.id)
    row = await get_user_address(db, user.id)
    return {
        "success": True,
        "currency": "XMR",
        "balance_xmr": float(balance.balance_xmr) if balance else 0.0,
        "address": row.address if row else None,
        "simulated": row.is_simulated if row else None,
        "wallet": await _daemon_balance(row),
    }


@router.get("/withdrawals")
async def get_withdrawals(user: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    withdrawals = list(await db.scalars(
        select(WithdrawalRequest)
        .where(WithdrawalRequest.user_id == user.id)
        .order_by(WithdrawalRequest.created_at.desc(), WithdrawalRequest.id.desc())
        .limit(20)
    ))
    return {"success": True, "withdrawals": [withdrawal_dict(w) for w in withdrawals]}


def withdrawal_dict(w: WithdrawalRequest) -> dict:
    return {
        "id": w.id,
        "user_id": w.user_id,
        "amount_eur": float(w.amount_eur),
        "fee_eur": float(w.fee_eur),
        "amount_crypto": float(w.amount_crypto),
        "currency": w.currency,
        "destination_address": w.destination_address,
        "status": w.status,
        "tx_hash": w.tx_hash,
        "notes": w.notes,
        "simulated": w.is_simulated,
        "created_at": w.created_at.isoformat() if w.created_at else None,
        "processed_at": w.processed_at.isoformat() if w.processed_at else None,
    }
