from sqlalchemy import Column, String, Numeric, DateTime
from sqlalchemy.sql import func
from storefront.database import Base

class WalletBalance(Base):
    __tablename__ = "wallet_balances"

    user_id = Column(String(36), primary_key=True)
    balance_xmr = Column(Numeric(precision=24, scale=12), nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
