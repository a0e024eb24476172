"""
Monero withdrawals: fee calculation, EUR -> XMR conversion, balance deduction and transfer.

Balance deduction is a single conditional UPDATE so two concurrent requests
cannot both pass the balance check.
"""
import logging
import secrets
from datetime import datetime, timezone
from decimal import Decimal, ROUND_DOWN
from typing import Optional, Tuple

import httpx
from cryptography.fernet import InvalidToken
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config import settings
from storefront.core.crypto import decrypt_secret
from storefront.models.wallet import WalletBalance
from storefront.models.withdrawal import WithdrawalRequest, WithdrawalFee, WithdrawalStatus
from storefront.services.addresses import get_user_address
from storefront.services.errors import WalletError
from storefront.services.fees import calc_withdrawal_fee
from storefront.services.monero_rpc import MoneroWalletRPC, MoneroRPCError, get_wallet_rpc, atomic_to_xmr
from storefront.services.pricing import fetch_price, PriceUnavailable

logger = logging.getLogger(__name__)

XMR_QUANT = Decimal("0.000000000001")
SIMULATED_NOTE = "Simulated transfer: wallet daemon unavailable"


async def get_fee_config(db: AsyncSession, currency: str) -> WithdrawalFee:
    fee = await db.scalar(select(WithdrawalFee).where(WithdrawalFee.currency == currency))
    if not fee:
        raise WalletError("Withdrawal fees not configured for Monero", 500)
    return fee


async def adjust_balance(db: AsyncSession, user_id: str, delta: Decimal) -> bool:
    """Add delta (may be negative) to the user's XMR balance.

    A debit only applies while the balance covers it; returns False otherwise.
    Does not commit.
    """
    stmt = (
        update(WalletBalance)
        .where(WalletBalance.user_id == user_id)
        .values(balance_xmr=WalletBalance.balance_xmr + delta)
        .execution_options(synchronize_session=False)
    )
    if delta < 0:
        stmt = stmt.where(WalletBalance.balance_xmr >= -delta)
    result = await db.execute(stmt)
    return result.rowcount == 1


async def _validate_destination(rpc: MoneroWalletRPC, address: str) -> None:
    try:
        valid = await rpc.validate_address(address)
    except (httpx.HTTPError, MoneroRPCError) as e:
        logger.warning("[Withdraw] address validation skipped, daemon error: %s", e)
        return
    if not valid:
        raise WalletError("Invalid Monero address", 400)


async def _source_wallet(db: AsyncSession, user_id: str) -> Optional[Tuple[str, str]]:
    """(filename, password) of the wallet that pays this user's withdrawals, or None."""
    if settings.MONERO_RPC_WALLET_FILE:
        return settings.MONERO_RPC_WALLET_FILE, settings.MONERO_RPC_WALLET_PASSWORD
    row = await get_user_address(db, user_id)
    if row is None or row.is_simulated or not row.private_key_encrypted:
        return None
    try:
        secret = decrypt_secret(row.private_key_encrypted)
    except InvalidToken:
        logger.warning("[Withdraw] stored key material for user %s is unreadable", user_id)
        return None
    if not secret.get("wallet_filename") or not secret.get("wallet_password"):
        return None
    return secret["wallet_filename"], secret["wallet_password"]


async def _send(rpc: MoneroWalletRPC, source: Tuple[str, str], address: str, amount: Decimal) -> dict:
    # monero-wallet-rpc holds a single open wallet; always switch to the payer's first
    await rpc.open_wallet(*source)
    return await rpc.transfer(
        address,
        amount,
        priority=settings.MONERO_TRANSFER_PRIORITY,
        ring_size=settings.MONERO_RING_SIZE,
    )


async def process_withdrawal(
    db: AsyncSession,
    user_id: str,
    amount_eur: Decimal,
    currency: str,
    destination_address: str,
) -> dict:
    if currency != "XMR":
        raise WalletError("This function only handles Monero withdrawals", 400)

    logger.info("[Withdraw] user %s: %s EUR to %s", user_id, amount_eur, destination_address)

    fee_config = await get_fee_config(db, currency)
    fee_eur, net_eur = calc_withdrawal_fee(amount_eur, fee_config.base_fee_eur, fee_config.percentage_fee)
    if net_eur <= 0:
        raise WalletError("Amount too small after fees", 400)

    try:
        price = await fetch_price(currency, "eur")
    except PriceUnavailable:
        raise WalletError("Could not fetch Monero price", 502)

    amount_crypto = (net_eur / price).quantize(XMR_QUANT, rounding=ROUND_DOWN)
    if amount_crypto <= 0:
        raise WalletError("Amount too small after fees", 400)

    balance = await db.get(WalletBalance, user_id)
    if balance is None or Decimal(str(balance.balance_xmr)) < amount_crypto:
        raise WalletError("Insufficient Monero balance", 400)

    rpc = get_wallet_rpc()
    source = None
    if rpc is not None:
        await _validate_destination(rpc, destination_address)
        source = await _source_wallet(db, user_id)
        if source is None:
            logger.warning("[Withdraw] user %s has no daemon wallet to pay from", user_id)

    withdrawal = WithdrawalRequest(
        user_id=user_id,
        amount_eur=amount_eur,
        currency=currency,
        destination_address=destination_address,
        fee_eur=fee_eur,
        amount_crypto=amount_crypto,
        status=WithdrawalStatus.pending,
    )
    db.add(withdrawal)
    await db.flush()

    if not await adjust_balance(db, user_id, -amount_crypto):
        await db.rollback()
        raise WalletError("Insufficient Monero balance", 409)
    await db.commit()

    warning = None
    tx_result = None
    if rpc is not None and source is not None:
        try:
            tx_result = await _send(rpc, source, destination_address, amount_crypto)
        except MoneroRPCError as e:
            logger.error("[Withdraw] transfer rejected for withdrawal %s: %s", withdrawal.id, e)
            await adjust_balance(db, user_id, amount_crypto)
            withdrawal.status = WithdrawalStatus.failed
            withdrawal.notes = f"Transfer rejected by wallet daemon: {e.message}"
            withdrawal.processed_at = datetime.now(timezone.utc)
            await db.commit()
            raise WalletError(f"Monero transfer failed: {e.message}", 502)
        except httpx.HTTPError as e:
            logger.error("[Withdraw] wallet daemon unreachable for withdrawal %s: %s", withdrawal.id, e)

    if tx_result is not None:
        withdrawal.status = WithdrawalStatus.completed
        withdrawal.tx_hash = tx_result.get("tx_hash")
        withdrawal.notes = f"Network fee: {atomic_to_xmr(tx_result.get('fee', 0))} XMR"
        withdrawal.processed_at = datetime.now(timezone.utc)
        logger.info("[Withdraw] %s XMR sent, tx %s", amount_crypto, withdrawal.tx_hash)
    else:
        withdrawal.status = WithdrawalStatus.processing
        withdrawal.tx_hash = secrets.token_hex(32)
        withdrawal.is_simulated = True
        withdrawal.notes = SIMULATED_NOTE
        warning = "Wallet daemon unavailable; withdrawal recorded but not broadcast"
        logger.warning("[Withdraw] withdrawal %s simulated, %s XMR not sent", withdrawal.id, amount_crypto)
    await db.commit()

    result = {
        "withdrawal_id": withdrawal.id,
        "amount_eur": float(amount_eur),
        "fee_eur": float(fee_eur),
        "net_amount_eur": float(net_eur),
        "estimated_crypto_amount": float(amount_crypto),
        "currency": currency,
        "status": withdrawal.status.value,
        "tx_hash": withdrawal.tx_hash,
        "simulated": withdrawal.is_simulated,
    }
    if warning:
        result["warning"] = warning
    return result
