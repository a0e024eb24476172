from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from storefront.database import Base

class News(Base):
    __tablename__ = "news"

    id = Column(Integer, primary_key=True)
    content = Column(Text, nullable=False)
    author_id = Column(String(36), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
