# storefront/services/orders.py
"""Checkout and the order status lifecycle."""
import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from storefront.config import settings
from storefront.models.cart import Cart, CartItem
from storefront.models.order import Order, OrderItem, OrderShipping, OrderStatus, ORDER_TRANSITIONS
from storefront.models.product import Product
from storefront.models.users import User
from storefront.services import cards, promos
from storefront.services.errors import NotFound, ValidationFailed, InvalidTransition

logger = logging.getLogger(__name__)


def compute_totals(subtotal: float, discount: float = 0.0) -> Tuple[float, float, float]:
    """Return ``(shipping_cost, tax, total)`` for a subtotal.

    Shipping is free strictly above the threshold, flat otherwise. Tax is taken
    on the subtotal before any promo discount.
    """
    shipping_cost = 0.0 if subtotal > settings.FREE_SHIPPING_THRESHOLD else settings.FLAT_SHIPPING_COST
    tax = round(subtotal * settings.TAX_RATE, 2)
    total = round(subtotal + shipping_cost + tax - discount, 2)
    return shipping_cost, tax, total


def _order_query(db: Session):
    return db.query(Order).options(
        joinedload(Order.items).joinedload(OrderItem.product),
        joinedload(Order.shipping),
    )


def _resolve_prices(db: Session, user_id: int, items) -> List[Tuple[Product, int, float]]:
    # Unit price comes from the caller's cart snapshot, falling back to the catalog price
    cart = db.query(Cart).filter(Cart.user_id == user_id).first()
    snapshot = {ci.product_id: ci.price for ci in cart.items} if cart else {}

    lines = []
    for it in items:
        if it.quantity < 1:
            raise ValidationFailed("quantity must be at least 1")
        product = db.query(Product).filter(Product.id == it.product_id).first()
        if not product:
            raise NotFound(f"Product {it.product_id} not found")
        price = snapshot.get(product.id, product.price)
        lines.append((product, it.quantity, price))
    return lines


def _payment_descriptor(db: Session, user_id: int, payment) -> dict:
    descriptor = {
        "method": payment.method,
        "provider": payment.provider,
        "transaction_id": payment.transaction_id,
        "status": "PAID",
        "paid_at": datetime.now(timezone.utc).isoformat(),
    }
    if payment.card_number and payment.card_name:
        if not (payment.expiry_month and payment.expiry_year):
            raise ValidationFailed("Card expiry is required")
        card = cards.find_or_stage_card(
            db, user_id, payment.card_number, payment.card_name,
            payment.expiry_month, payment.expiry_year,
        )
        descriptor.update({"card_id": card.id, "last4": card.last4, "card_brand": card.card_brand})
    return descriptor


def create_order(db: Session, user_id: int, items, shipping, payment, promo_code: Optional[str] = None) -> Order:
    """Create an order header, its items and shipping record in one transaction.

    The optional promo code is evaluated against the server-side subtotal and
    redeemed in the same transaction; the purchased products are removed from
    the caller's cart. Any failure rolls the whole order back.
    """
    if not items:
        raise ValidationFailed("Items required")

    try:
        lines = _resolve_prices(db, user_id, items)
        subtotal = round(sum(price * qty for _, qty, price in lines), 2)

        quote = None
        discount = 0.0
        if promo_code:
            quote = promos.evaluate(db, user_id, promo_code, subtotal)
            discount = quote.discount

        shipping_cost, tax, total = compute_totals(subtotal, discount)

        order = Order(
            user_id=user_id,
            status=OrderStatus.PAID,
            subtotal=subtotal,
            shipping_cost=shipping_cost,
            tax=tax,
            discount=discount,
            total=total,
            promo_code_id=quote.promo_id if quote else None,
        )
        db.add(order)
        db.flush()

        for product, qty, price in lines:
            db.add(OrderItem(order_id=order.id, product_id=product.id, quantity=qty, price_at_time=price))

        db.add(OrderShipping(
            order_id=order.id,
            full_name=shipping.full_name,
            email=shipping.email,
            phone_number=shipping.phone,
            home_address=shipping.address,
            city=shipping.city,
            state=shipping.state,
            zip_code=shipping.zip_code,
            country=shipping.country or settings.DEFAULT_COUNTRY,
            shipping_method=settings.DEFAULT_SHIPPING_METHOD,
            shipping_cost=shipping_cost,
        ))

        order.payment = _payment_descriptor(db, user_id, payment)

        if quote:
            promos.redeem(db, quote.promo_id, user_id, order.id)

        cart = db.query(Cart).filter(Cart.user_id == user_id).first()
        if cart:
            purchased = [product.id for product, _, _ in lines]
            db.query(CartItem).filter(
                CartItem.cart_id == cart.id, CartItem.product_id.in_(purchased)
            ).delete(synchronize_session=False)

        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("order %s created for user %s, total %.2f", order.id, user_id, total)
    return get_order(db, order.id)


def get_order(db: Session, order_id: int) -> Order:
    order = _order_query(db).filter(Order.id == order_id).first()
    if not order:
        raise NotFound("Order not found")
    return order


def get_order_for(db: Session, order_id: int, user: User) -> Order:
    """Fetch an order visible to ``user``: their own, or any order for admins."""
    order = _order_query(db).filter(Order.id == order_id).first()
    if not order or (order.user_id != user.id and (user.role or "").lower() != "admin"):
        raise NotFound("Order not found")
    return order


def list_orders(db: Session, user_id: int) -> List[Order]:
    return (
        _order_query(db)
        .filter(Order.user_id == user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def complete_order(db: Session, order_id: int, user_id: int) -> Order:
    """Customer confirms receipt: ``delivered`` -> ``completed``."""
    order = db.query(Order).filter(Order.id == order_id, Order.user_id == user_id).first()
    if not order:
        raise NotFound("Order not found")

    if order.status != OrderStatus.DELIVERED:
        raise InvalidTransition("Order can only be completed after delivery")

    order.status = OrderStatus.COMPLETED
    order.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(order)
    return order


def parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus((value or "").strip().lower())
    except ValueError:
        raise ValidationFailed(f"Unknown order status: {value}")


def set_status(db: Session, order_id: int, new_status: str, force: bool = False) -> Tuple[Order, OrderStatus]:
    """Move an order to ``new_status`` following the transition table.

    ``force`` bypasses the table; it is reserved for admin corrections and the
    route audits every forced change. Returns the order and its previous status.
    """
    target = parse_status(new_status)

    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise NotFound("Order not found")

    old_status = OrderStatus(order.status)
    if not force and target not in ORDER_TRANSITIONS[old_status]:
        raise InvalidTransition(f"Cannot change status from {old_status.value} to {target.value}")

    order.status = target
    order.updated_at = datetime.now(timezone.utc)
    db.commit()
    return get_order(db, order.id), old_status
