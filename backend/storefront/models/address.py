from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from storefront.database import Base

class UserAddress(Base):
    __tablename__ = "user_addresses"
    __table_args__ = (UniqueConstraint("user_id", "currency", name="uq_user_addresses_user_currency"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(String(36), nullable=False, index=True)
    currency = Column(String(10), nullable=False)
    address = Column(String(106), nullable=False)
    private_key_encrypted = Column(Text, nullable=True)
    # True when the address was fabricated locally rather than by monero-wallet-rpc
    is_simulated = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
