from storefront.models.address import UserAddress
from storefront.models.wallet import WalletBalance
from storefront.models.withdrawal import WithdrawalRequest, WithdrawalFee, WithdrawalStatus
from storefront.models.order import Order, OrderItem
from storefront.models.news import News

__all__ = [
    "UserAddress", "WalletBalance", "WithdrawalRequest", "WithdrawalFee",
    "WithdrawalStatus", "Order", "OrderItem", "News",
]
