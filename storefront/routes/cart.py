# storefront/routes/cart.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from storefront.database import get_db
from storefront.utils.tokenJWT import get_current_user, get_optional_user
from storefront.utils.audit import write_log, client_ip
from storefront.models.users import User
from storefront.models.cart import CartItem
from storefront.schemas.cart import CartAddItem, CartRemoveItem, CartOut, CartItemOut
from storefront.schemas.product import ProductSummary
from storefront.services import cart as cart_service

router = APIRouter(prefix="/api/cart", tags=["Cart"])

def _cart_to_out(items: List[CartItem]) -> CartOut:
    items_out = []
    total = 0.0

    for it in items:
        line_total = round(it.price * it.quantity, 2)
        total += line_total
        items_out.append(CartItemOut(
            id=it.id,
            product_id=it.product_id,
            quantity=it.quantity,
            price=it.price,
            line_total=line_total,
            products=ProductSummary.model_validate(it.product),
        ))

    return CartOut(items=items_out, count=len(items_out), total=round(total, 2))

@router.get("/fetch", response_model=CartOut)
def fetch_cart(
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user)
):
    # Anonymous visitors simply see an empty cart
    user_id = current_user.id if current_user else None
    return _cart_to_out(cart_service.fetch_items(db, user_id))

@router.post("/add", response_model=CartOut)
def add_to_cart(
    payload: CartAddItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    item = cart_service.add_item(db, current_user.id, payload.product_id, payload.quantity)

    out = _cart_to_out(cart_service.fetch_items(db, current_user.id))
    write_log(
        db,
        user_id=current_user.id,
        action="CART_ADD",
        resource="cart",
        ip=client_ip(request),
        meta={"product_id": payload.product_id, "qty": payload.quantity, "line_qty": item.quantity, "total": out.total},
    )
    return out

@router.post("/remove", response_model=CartOut)
def remove_from_cart(
    payload: CartRemoveItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    cart_service.remove_item(db, current_user.id, payload.item_id)

    out = _cart_to_out(cart_service.fetch_items(db, current_user.id))
    write_log(
        db,
        user_id=current_user.id,
        action="CART_REMOVE",
        resource="cart",
        ip=client_ip(request),
        meta={"item_id": payload.item_id, "cart_items": out.count, "total": out.total},
    )
    return out
