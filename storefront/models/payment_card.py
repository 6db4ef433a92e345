# storefront/models/payment_card.py
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, func
from storefront.database import Base

# Saved card reference. Only the last four digits and a fingerprint of the number are kept.
class PaymentCard(Base):
    __tablename__ = "payment_cards"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    last4 = Column(String(4), nullable=False)
    card_brand = Column(String, nullable=False)
    cardholder_name = Column(String, nullable=False)
    expiry_month = Column(Integer, nullable=False)
    expiry_year = Column(Integer, nullable=False)
    is_default = Column(Boolean, nullable=False, default=False)
    fingerprint = Column(String(64), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
