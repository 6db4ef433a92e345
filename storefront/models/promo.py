# storefront/models/promo.py
import enum
from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, DateTime, Enum, UniqueConstraint, func
from sqlalchemy.orm import relationship
from storefront.database import Base

class DiscountType(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"

# Promotional code redeemable once per user
class PromoCode(Base):
    __tablename__ = "promo_codes"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String, unique=True, nullable=False, index=True) # Stored upper-cased
    discount_type = Column(
        Enum(DiscountType, values_callable=lambda e: [m.value for m in e], native_enum=False),
        nullable=False,
    )
    discount_value = Column(Float, nullable=False)
    max_discount = Column(Float, nullable=True)
    min_order_amount = Column(Float, nullable=False, default=0)
    usage_limit = Column(Integer, nullable=True)
    used_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    redemptions = relationship("PromoRedemption", back_populates="promo", cascade="all, delete-orphan")


# Marks that a user has consumed a promo code
class PromoRedemption(Base):
    __tablename__ = "promo_redemptions"

    id = Column(Integer, primary_key=True, index=True)
    promo_id = Column(Integer, ForeignKey("promo_codes.id"), index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    promo = relationship("PromoCode", back_populates="redemptions")

    __table_args__ = (
        UniqueConstraint("promo_id", "user_id", name="uq_redemption_promo_user"),
    )
