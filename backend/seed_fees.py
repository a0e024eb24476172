import asyncio
import sys
from decimal import Decimal
from sqlalchemy import select
from storefront.database import AsyncSessionLocal
from storefront.models import WithdrawalFee

async def seed_fee(currency: str, base_fee_eur: Decimal, percentage_fee: Decimal):
    async with AsyncSessionLocal() as session:
        fee = await session.scalar(select(WithdrawalFee).where(WithdrawalFee.currency == currency))
        if fee:
            fee.base_fee_eur = base_fee_eur
            fee.percentage_fee = percentage_fee
        else:
            session.add(WithdrawalFee(currency=currency, base_fee_eur=base_fee_eur, percentage_fee=percentage_fee))
        await session.commit()
        print(f"{currency} withdrawal fee: {base_fee_eur} EUR + {percentage_fee * 100}%")

if __name__ == "__main__":
    # usage: python seed_fees.py [base_fee_eur] [percentage_fee]
    base = Decimal(sys.argv[1]) if len(sys.argv) > 1 else Decimal("2")
    pct = Decimal(sys.argv[2]) if len(sys.argv) > 2 else Decimal("0.01")
    asyncio.run(seed_fee("XMR", base, pct))
