"""
SQLAlchemy ORM Models
Product Insight Engine catalog
"""

from sqlalchemy import Column, Float, String, Text, DateTime, JSON, Index
from sqlalchemy.orm import declarative_base
from datetime import datetime

Base = declarative_base()


def empty_analytics() -> dict:
    return {"views": 0, "sales": 0, "reviews": [], "rating": 0, "sentiment": "neutral"}


class Product(Base):
    __tablename__ = "product"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, default="")
    price = Column(Float, nullable=False)
    category = Column(String(255), default="General")
    brand = Column(String(255), default="")
    ingredients = Column(Text, nullable=True)
    specifications = Column(JSON, default=dict)
    images = Column(JSON, default=list)
    tags = Column(JSON, default=list)
    analytics = Column(JSON, default=empty_analytics)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (Index("ix_product_category", "category"),)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description or "",
            "price": self.price,
            "category": self.category,
            "brand": self.brand or "",
            "ingredients": self.ingredients,
            "specifications": dict(self.specifications or {}),
            "images": list(self.images or []),
            "tags": list(self.tags or []),
            "analytics": dict(self.analytics or empty_analytics()),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
