# storefront/models/order.py
import enum
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Enum, JSON, CheckConstraint, func
from sqlalchemy.orm import relationship
from storefront.database import Base


# Lifecycle of an order after checkout
class OrderStatus(str, enum.Enum):
    PAID = "paid"
    PROCESSING = "processing"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Allowed next states; completed and cancelled are terminal
ORDER_TRANSITIONS = {
    OrderStatus.PAID: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: {OrderStatus.COMPLETED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    status = Column(
        Enum(OrderStatus, values_callable=lambda e: [m.value for m in e], native_enum=False),
        nullable=False,
        default=OrderStatus.PAID,
        index=True,
    )

    # Money columns, rounded to 2 places at checkout
    subtotal = Column(Float, nullable=False)
    shipping_cost = Column(Float, nullable=False)
    tax = Column(Float, nullable=False)
    discount = Column(Float, nullable=False, default=0)
    total = Column(Float, nullable=False)

    promo_code_id = Column(Integer, ForeignKey("promo_codes.id"), nullable=True)
    payment = Column(JSON, nullable=True) # Serialized payment descriptor

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.id")
    shipping = relationship("OrderShipping", back_populates="order", uselist=False, cascade="all, delete-orphan")


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)
    quantity = Column(Integer, CheckConstraint("quantity >= 1"), nullable=False)
    price_at_time = Column(Float, nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship("Product")


# Delivery details captured at checkout, exactly one per order
class OrderShipping(Base):
    __tablename__ = "order_shipping"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), unique=True, nullable=False)
    full_name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone_number = Column(String, nullable=True)
    home_address = Column(String, nullable=False)
    city = Column(String, nullable=False)
    state = Column(String, nullable=False)
    zip_code = Column(String, nullable=False)
    country = Column(String, nullable=False)
    shipping_method = Column(String, nullable=False)
    shipping_cost = Column(Float, nullable=False)

    order = relationship("Order", back_populates="shipping")
