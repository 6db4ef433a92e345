# storefront/models/cart.py
from sqlalchemy import Column, Integer, ForeignKey, DateTime, Float, UniqueConstraint, CheckConstraint, func
from sqlalchemy.orm import relationship
from storefront.database import Base

# Represents the user's shopping cart (one per user)
class Cart(Base):
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    items = relationship("CartItem", back_populates="cart", cascade="all, delete-orphan", order_by="CartItem.id")


# Represents a single product line within a cart
class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True, index=True)
    cart_id = Column(Integer, ForeignKey("carts.id"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)
    quantity = Column(Integer, CheckConstraint("quantity >= 1"), nullable=False, default=1)
    price = Column(Float, nullable=False) # Unit price at the moment of addition
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    cart = relationship("Cart", back_populates="items")
    product = relationship("Product")

    __table_args__ = (
        # Repeated adds of the same product increment quantity instead of adding rows
        UniqueConstraint("cart_id", "product_id", name="uq_cartitem_cart_product"),
    )
