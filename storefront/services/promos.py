# storefront/services/promos.py
"""Promo code evaluation and redemption.

Evaluation is read-only: it tells the caller what a code would be worth for a
given subtotal. Redemption is a separate step, performed by checkout inside the
same transaction that creates the order.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.models.promo import PromoCode, PromoRedemption, DiscountType
from storefront.services.errors import (
    NotFound, PromoExpired, BelowMinimum, UsageLimitReached, AlreadyRedeemed,
)

logger = logging.getLogger(__name__)


@dataclass
class PromoQuote:
    promo_id: int
    code: str
    discount: float
    final_subtotal: float


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def format_currency(amount: float) -> str:
    """Format an amount the way the storefront displays prices, e.g. ``Rp 50.000``."""
    if settings.CURRENCY == "IDR":
        return "Rp " + f"{amount:,.0f}".replace(",", ".")
    return f"{amount:,.2f} {settings.CURRENCY}"


def compute_discount(promo: PromoCode, subtotal: float) -> float:
    if promo.discount_type == DiscountType.PERCENTAGE:
        discount = subtotal * promo.discount_value / 100
    else:
        discount = promo.discount_value

    if promo.max_discount is not None:
        discount = min(discount, promo.max_discount)

    # Never more than the order value, never negative
    discount = max(0.0, min(discount, subtotal))
    return round(discount, 2)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def evaluate(db: Session, user_id: int, code: str, subtotal: float, now: Optional[datetime] = None) -> PromoQuote:
    """Check a promo code against a subtotal and compute its discount.

    Checks run in a fixed order and the first failure wins: unknown or inactive
    code, expiry, minimum order amount, global usage limit, prior redemption by
    this user.
    """
    now = now or datetime.now(timezone.utc)

    promo = db.query(PromoCode).filter(
        PromoCode.code == normalize_code(code), PromoCode.is_active.is_(True)
    ).first()
    if not promo:
        raise NotFound("Promo code not found")

    if promo.expires_at is not None and _as_utc(promo.expires_at) < now:
        raise PromoExpired()

    if subtotal < (promo.min_order_amount or 0):
        raise BelowMinimum(f"Minimum order is {format_currency(promo.min_order_amount)}")

    if promo.usage_limit is not None and (promo.used_count or 0) >= promo.usage_limit:
        raise UsageLimitReached()

    redeemed = db.query(PromoRedemption).filter(
        PromoRedemption.promo_id == promo.id, PromoRedemption.user_id == user_id
    ).first()
    if redeemed:
        raise AlreadyRedeemed()

    discount = compute_discount(promo, subtotal)
    return PromoQuote(
        promo_id=promo.id,
        code=promo.code,
        discount=discount,
        final_subtotal=round(subtotal - discount, 2),
    )


def redeem(db: Session, promo_id: int, user_id: int, order_id: Optional[int] = None) -> PromoRedemption:
    """Record that ``user_id`` consumed the promo and bump its usage counter.

    Flushes but does not commit; the caller owns the transaction and must roll
    back when this raises.
    """
    redemption = PromoRedemption(promo_id=promo_id, user_id=user_id, order_id=order_id)
    db.add(redemption)
    try:
        db.flush()
    except IntegrityError:
        # Another request redeemed the same code for this user first
        raise AlreadyRedeemed()

    table = PromoCode.__table__
    result = db.execute(
        update(table)
        .where(table.c.id == promo_id)
        .where((table.c.usage_limit.is_(None)) | (table.c.used_count < table.c.usage_limit))
        .values(used_count=table.c.used_count + 1)
    )
    if result.rowcount == 0:
        raise UsageLimitReached()

    logger.info("promo %s redeemed by user %s for order %s", promo_id, user_id, order_id)
    return redemption
