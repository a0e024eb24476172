from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from storefront.database import Base

class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), nullable=False, index=True)
    total_amount_eur = Column(Numeric(precision=12, scale=2), nullable=False)
    status = Column(String(30), nullable=False, default="pending")
    shipping_first_name = Column(String(100))
    shipping_last_name = Column(String(100))
    shipping_street = Column(String(200))
    shipping_house_number = Column(String(20))
    shipping_postal_code = Column(String(20))
    shipping_city = Column(String(100))
    shipping_country = Column(String(100))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    items = relationship("OrderItem", back_populates="order")

class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(String(36), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    price_eur = Column(Numeric(precision=12, scale=2), nullable=False)

    order = relationship("Order", back_populates="items")
