from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field
from storefront.models.withdrawal import WithdrawalStatus


class WithdrawalCreate(BaseModel):
    amount_eur: Decimal = Field(gt=0)
    currency: str = "XMR"
    destination_address: str = Field(min_length=1, max_length=106)


class WithdrawalFeeUpdate(BaseModel):
    base_fee_eur: Decimal = Field(ge=0)
    percentage_fee: Decimal = Field(ge=0, lt=1)


class BalanceCredit(BaseModel):
    user_id: str = Field(min_length=1, max_length=36)
    amount_xmr: Decimal = Field(gt=0)


class WithdrawalUpdate(BaseModel):
    status: WithdrawalStatus
    tx_hash: Optional[str] = Field(default=None, max_length=64)
    notes: Optional[str] = None
