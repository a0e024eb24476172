import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from storefront.database import get_db
from storefront.core.deps import CurrentUser, require_admin
from storefront.models.wallet import WalletBalance
from storefront.models.withdrawal import WithdrawalRequest, WithdrawalFee, WithdrawalStatus
from storefront.schemas.wallet import WithdrawalFeeUpdate, BalanceCredit, WithdrawalUpdate
from storefront.routers.wallet import withdrawal_dict
from storefront.services.withdrawals import adjust_balance

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/withdrawal-fees")
async def list_withdrawal_fees(admin: CurrentUser = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    fees = await db.scalars(select(WithdrawalFee).order_by(WithdrawalFee.currency))
    return {
        "success": True,
        "fees": [
            {
                "currency": f.currency,
                "base_fee_eur": float(f.base_fee_eur),
                "percentage_fee": float(f.percentage_fee),
            }
            for f in fees
        ],
    }


@router.put("/withdrawal-fees/{currency}")
async def set_withdrawal_fee(
    currency: str,
    body: WithdrawalFeeUpdate,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    currency = currency.upper()
    fee = await db.scalar(select(WithdrawalFee).where(WithdrawalFee.currency == currency))
    if fee:
        fee.base_fee_eur = body.base_fee_eur
        fee.percentage_fee = body.percentage_fee
    else:
        db.add(WithdrawalFee(
            currency=currency, base_fee_eur=body.base_fee_eur, percentage_fee=body.percentage_fee,
        ))
    await db.commit()
    logger.info("[Admin] %s set %s fee: base=%s pct=%s", admin.id, currency, body.base_fee_eur, body.percentage_fee)
    return {"success": True, "message": "fee updated"}


@router.post("/balances/credit")
async def credit_balance(
    body: BalanceCredit,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Credit a confirmed deposit to a user's XMR balance."""
    if not await adjust_balance(db, body.user_id, body.amount_xmr):
        db.add(WalletBalance(user_id=body.user_id, balance_xmr=body.amount_xmr))
    await db.commit()
    balance = await db.get(WalletBalance, body.user_id)
    await db.refresh(balance)
    logger.info("[Admin] %s credited %s XMR to %s", admin.id, body.amount_xmr, body.user_id)
    return {"success": True, "user_id": body.user_id, "balance_xmr": float(balance.balance_xmr)}


@router.get("/withdrawals")
async def list_withdrawals(
    status: Optional[WithdrawalStatus] = None,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    query = select(WithdrawalRequest).order_by(WithdrawalRequest.created_at.desc()).limit(100)
    if status:
        query = query.where(WithdrawalRequest.status == status)
    withdrawals = await db.scalars(query)
    return {"success": True, "withdrawals": [withdrawal_dict(w) for w in withdrawals]}


@router.put("/withdrawals/{withdrawal_id}")
async def update_withdrawal(
    withdrawal_id: int,
    body: WithdrawalUpdate,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Settle a withdrawal by hand. Failing it returns the XMR to the user."""
    w = await db.get(WithdrawalRequest, withdrawal_id)
    if not w:
        raise HTTPException(404, "Withdrawal not found")
    if w.status in (WithdrawalStatus.completed, WithdrawalStatus.failed):
        raise HTTPException(409, f"Withdrawal already {w.status.value}")
    if body.status == WithdrawalStatus.completed and w.is_simulated and not body.tx_hash:
        raise HTTPException(400, "tx_hash is required to complete a simulated withdrawal")

    if body.status == WithdrawalStatus.failed:
        await adjust_balance(db, w.user_id, Decimal(str(w.amount_crypto)))
    if body.status in (WithdrawalStatus.completed, WithdrawalStatus.failed):
        w.processed_at = datetime.now(timezone.utc)
    if body.tx_hash:
        w.tx_hash = body.tx_hash
        w.is_simulated = False
    if body.notes is not None:
        w.notes = body.notes
    w.status = body.status
    await db.commit()
    return {"success": True, "withdrawal": withdrawal_dict(w)}
