from sqlalchemy import Column, Integer, String, Numeric, Boolean, DateTime, Text, Enum
from sqlalchemy.sql import func
import enum
from storefront.database import Base


class WithdrawalStatus(str, enum.Enum):
    pending = "pending"
    processing = "processing"
    completed = "completed"
    failed = "failed"


class WithdrawalRequest(Base):
    __tablename__ = "withdrawal_requests"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(36), nullable=False, index=True)
    amount_eur = Column(Numeric(18, 2), nullable=False)
    currency = Column(String(10), nullable=False)
    destination_address = Column(String(106), nullable=False)
    fee_eur = Column(Numeric(18, 2), nullable=False)
    amount_crypto = Column(Numeric(24, 12), nullable=False)
    status = Column(Enum(WithdrawalStatus), nullable=False, default=WithdrawalStatus.pending)
    tx_hash = Column(String(64), nullable=True)
    notes = Column(Text, nullable=True)
    # Set when the transfer was never sent to the network
    is_simulated = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    processed_at = Column(DateTime(timezone=True), nullable=True)


class WithdrawalFee(Base):
    __tablename__ = "withdrawal_fees"

    id = Column(Integer, primary_key=True)
    currency = Column(String(10), unique=True, nullable=False)
    base_fee_eur = Column(Numeric(18, 2), nullable=False, default=0)
    percentage_fee = Column(Numeric(8, 6), nullable=False, default=0)  # 0.01 = 1%
