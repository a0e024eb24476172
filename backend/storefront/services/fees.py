from decimal import Decimal
from typing import Tuple


def calc_withdrawal_fee(amount_eur, base_fee_eur, percentage_fee) -> Tuple[Decimal, Decimal]:
    """Return (fee_eur, net_amount_eur) for a withdrawal of amount_eur.

    fee = base_fee + amount * percentage_fee. The net amount may be zero or
    negative; callers reject those.
    """
    amount = Decimal(str(amount_eur))
    fee = Decimal(str(base_fee_eur)) + amount * Decimal(str(percentage_fee))
    return fee, amount - fee
