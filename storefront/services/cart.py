# storefront/services/cart.py
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session, contains_eager

from storefront.models.cart import Cart, CartItem
from storefront.models.product import Product
from storefront.services.errors import NotFound, ValidationFailed

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}


def _dialect_insert(db: Session):
    return _UPSERT_DIALECTS.get(db.get_bind().dialect.name)


def get_cart(db: Session, user_id: int) -> Optional[Cart]:
    return db.query(Cart).filter(Cart.user_id == user_id).first()


def get_or_create_cart(db: Session, user_id: int) -> Cart:
    """Return the user's cart, creating it on first use."""
    cart = get_cart(db, user_id)
    if cart:
        return cart

    insert = _dialect_insert(db)
    if insert is not None:
        # A concurrent request may create the same cart; the unique user_id makes this a no-op
        stmt = insert(Cart.__table__).values(user_id=user_id).on_conflict_do_nothing(index_elements=["user_id"])
        db.execute(stmt)
    else:
        db.add(Cart(user_id=user_id))
    db.flush()
    return db.query(Cart).filter(Cart.user_id == user_id).one()


def add_item(db: Session, user_id: int, product_id: int, quantity: int = 1) -> CartItem:
    """Add a product to the user's cart or increase the quantity of its existing line.

    The unit price is snapshotted from the catalog when the line is first created;
    later adds only bump the quantity and keep the first snapshot.
    """
    if quantity < 1:
        raise ValidationFailed("quantity must be at least 1")

    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise NotFound("Product not found")

    cart = get_or_create_cart(db, user_id)
    table = CartItem.__table__
    insert = _dialect_insert(db)

    if insert is not None:
        stmt = insert(table).values(
            cart_id=cart.id, product_id=product.id, quantity=quantity, price=product.price,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["cart_id", "product_id"],
            set_={"quantity": table.c.quantity + stmt.excluded.quantity},
        )
        db.execute(stmt)
    else:
        item = db.query(CartItem).filter(
            CartItem.cart_id == cart.id, CartItem.product_id == product.id
        ).with_for_update().first()
        if item:
            item.quantity += quantity
        else:
            db.add(CartItem(cart_id=cart.id, product_id=product.id, quantity=quantity, price=product.price))

    db.commit()

    item = db.execute(
        select(CartItem)
        .where(CartItem.cart_id == cart.id, CartItem.product_id == product.id)
        .execution_options(populate_existing=True)
    ).scalar_one()
    logger.info("cart %s: product %s quantity now %s", cart.id, product.id, item.quantity)
    return item


def fetch_items(db: Session, user_id: Optional[int]) -> List[CartItem]:
    """Cart lines with their live product rows; empty without a session or cart.

    Lines whose product row is gone are left out.
    """
    if not user_id:
        return []
    cart = get_cart(db, user_id)
    if not cart:
        return []
    return (
        db.query(CartItem)
        .join(CartItem.product)
        .options(contains_eager(CartItem.product))
        .filter(CartItem.cart_id == cart.id)
        .order_by(CartItem.id)
        .all()
    )


def remove_item(db: Session, user_id: int, item_id: int) -> None:
    # Ownership goes through the caller's cart, never the item id alone
    cart = get_cart(db, user_id)
    if not cart:
        raise NotFound("Cart not found")

    item = db.query(CartItem).filter(CartItem.id == item_id, CartItem.cart_id == cart.id).first()
    if not item:
        raise NotFound("Cart item not found")

    db.delete(item)
    db.commit()
