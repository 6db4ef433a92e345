# storefront/services/reviews.py
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.models.order import Order, OrderItem, OrderStatus
from storefront.models.review import ProductReview
from storefront.services.errors import (
    NotFound, Forbidden, NotReady, ProductNotInOrder, DuplicateReview, ValidationFailed,
)

MAX_REVIEW_LENGTH = 1000


def submit_review(db: Session, user_id: int, order_id: int, product_id: int,
                  rating: int, review: Optional[str] = None) -> ProductReview:
    """Create a review for a product of a completed order, once per (user, order, product)."""
    if rating is None or not 1 <= rating <= 5:
        raise ValidationFailed("Invalid rating value")
    if review and len(review) > MAX_REVIEW_LENGTH:
        raise ValidationFailed("Review too long")

    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise NotFound("Order not found")
    if order.user_id != user_id:
        raise Forbidden("Unauthorized")
    if order.status != OrderStatus.COMPLETED:
        raise NotReady()

    in_order = db.query(OrderItem.id).filter(
        OrderItem.order_id == order_id, OrderItem.product_id == product_id
    ).first()
    if not in_order:
        raise ProductNotInOrder()

    existing = db.query(ProductReview.id).filter(
        ProductReview.user_id == user_id,
        ProductReview.order_id == order_id,
        ProductReview.product_id == product_id,
    ).first()
    if existing:
        raise DuplicateReview()

    entry = ProductReview(user_id=user_id, order_id=order_id, product_id=product_id, rating=rating, review=review)
    db.add(entry)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateReview()
    db.refresh(entry)
    return entry
