# storefront/services/favorites.py
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, contains_eager

from storefront.models.favorite import Favorite
from storefront.models.product import Product
from storefront.services.errors import NotFound, Conflict


def add_favorite(db: Session, user_id: int, product_id: int) -> Favorite:
    if not db.query(Product.id).filter(Product.id == product_id).first():
        raise NotFound("Product not found")

    existing = db.query(Favorite).filter(
        Favorite.user_id == user_id, Favorite.product_id == product_id
    ).first()
    if existing:
        raise Conflict("Item already exists in favorites")

    favorite = Favorite(user_id=user_id, product_id=product_id)
    db.add(favorite)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Item already exists in favorites")
    db.refresh(favorite)
    return favorite


def list_favorites(db: Session, user_id: Optional[int]) -> List[Favorite]:
    if not user_id:
        return []
    return (
        db.query(Favorite)
        .join(Favorite.product)
        .options(contains_eager(Favorite.product))
        .filter(Favorite.user_id == user_id)
        .order_by(Favorite.id)
        .all()
    )
