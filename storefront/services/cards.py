# storefront/services/cards.py
import hashlib
import re
from typing import List, Optional

from sqlalchemy.orm import Session

from storefront.models.payment_card import PaymentCard
from storefront.services.errors import NotFound, ValidationFailed

_BRANDS = [
    (re.compile(r"^4"), "Visa"),
    (re.compile(r"^5[1-5]"), "Mastercard"),
    (re.compile(r"^3[47]"), "Amex"),
]


def clean_number(card_number: str) -> str:
    digits = re.sub(r"[\s-]", "", str(card_number or ""))
    if not digits.isdigit() or not 12 <= len(digits) <= 19:
        raise ValidationFailed("Invalid card number")
    return digits


def detect_card_brand(card_number: str) -> str:
    for pattern, brand in _BRANDS:
        if pattern.match(card_number):
            return brand
    return "Unknown"


def card_fingerprint(card_number: str) -> str:
    return hashlib.sha256(card_number.encode("utf-8")).hexdigest()


def list_cards(db: Session, user_id: int) -> List[PaymentCard]:
    return (
        db.query(PaymentCard)
        .filter(PaymentCard.user_id == user_id)
        .order_by(PaymentCard.is_default.desc(), PaymentCard.created_at.desc(), PaymentCard.id.desc())
        .all()
    )


def _clear_default(db: Session, user_id: int):
    db.query(PaymentCard).filter(PaymentCard.user_id == user_id).update(
        {PaymentCard.is_default: False}, synchronize_session="fetch"
    )


def build_card(db: Session, user_id: int, card_number: str, cardholder_name: str,
               expiry_month: int, expiry_year: int, is_default: bool = False,
               brand: Optional[str] = None) -> PaymentCard:
    """Stage a new card on the session without committing."""
    number = clean_number(card_number)
    if is_default:
        _clear_default(db, user_id)
    card = PaymentCard(
        user_id=user_id,
        last4=number[-4:],
        card_brand=brand or detect_card_brand(number),
        cardholder_name=cardholder_name,
        expiry_month=expiry_month,
        expiry_year=expiry_year,
        is_default=bool(is_default),
        fingerprint=card_fingerprint(number),
    )
    db.add(card)
    return card


def add_card(db: Session, user_id: int, **fields) -> PaymentCard:
    card = build_card(db, user_id, **fields)
    db.commit()
    db.refresh(card)
    return card


def find_or_stage_card(db: Session, user_id: int, card_number: str, cardholder_name: str,
                       expiry_month: int, expiry_year: int, brand: Optional[str] = None) -> PaymentCard:
    """Reuse a saved card with the same number, or stage a new one (used by checkout)."""
    number = clean_number(card_number)
    existing = db.query(PaymentCard).filter(
        PaymentCard.user_id == user_id, PaymentCard.fingerprint == card_fingerprint(number)
    ).first()
    if existing:
        return existing

    has_cards = db.query(PaymentCard.id).filter(PaymentCard.user_id == user_id).first() is not None
    card = build_card(
        db, user_id, number, cardholder_name, expiry_month, expiry_year,
        is_default=not has_cards, brand=brand,
    )
    db.flush()
    return card


def _owned_card(db: Session, user_id: int, card_id: int) -> PaymentCard:
    card = db.query(PaymentCard).filter(PaymentCard.id == card_id, PaymentCard.user_id == user_id).first()
    if not card:
        raise NotFound("Card not found")
    return card


def set_default(db: Session, user_id: int, card_id: int) -> PaymentCard:
    card = _owned_card(db, user_id, card_id)
    _clear_default(db, user_id)
    card.is_default = True
    db.commit()
    db.refresh(card)
    return card


def delete_card(db: Session, user_id: int, card_id: int) -> None:
    card = _owned_card(db, user_id, card_id)
    db.delete(card)
    db.commit()
