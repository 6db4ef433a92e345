# storefront/models/product.py
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from storefront.database import Base


# Product category shown in the storefront navigation
class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, nullable=False, index=True)
    description = Column(String, nullable=True)
    image = Column(String, nullable=True)
    icon = Column(String, nullable=True)

    products = relationship("Product", back_populates="category")


# Catalog entry. Stock is informational only, checkout never reserves it.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(String, nullable=True)
    image = Column(String, nullable=True)

    price = Column(Float, CheckConstraint("price >= 0"), nullable=False)
    stock = Column(Integer, CheckConstraint("stock >= 0"), nullable=False, default=0)
    status = Column(String, nullable=False, default="active", index=True) # "active" or "inactive"

    # Percentage off the list price (0-100)
    discount = Column(Float, CheckConstraint("discount IS NULL OR (discount >= 0 AND discount <= 100)"), nullable=True)
    rating = Column(Float, nullable=True)

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    category = relationship("Category", back_populates="products")

    @property
    def final_price(self) -> float:
        return discounted_price(self.price, self.discount)


def discounted_price(price, discount) -> float:
    """Price after applying a percentage discount, rounded to cents."""
    if not discount:
        return round(price, 2)
    return round(price * (1 - discount / 100.0), 2)
