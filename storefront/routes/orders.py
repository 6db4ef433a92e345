# storefront/routes/orders.py
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.utils.tokenJWT import get_current_user
from storefront.utils.audit import write_log, client_ip
from storefront.models.users import User
from storefront.models.order import Order
from storefront.schemas.order import (
    OrderCreatePayload, OrderCreated, OrderResponse, OrderItemOut, ShippingOut,
    OrderEnvelope, OrderList, OrderComplete,
)
from storefront.services import orders as order_service

router = APIRouter(prefix="/api/orders", tags=["Orders"])

# Map Order model to OrderResponse schema
def _order_to_out(order: Order) -> OrderResponse:
    items = []
    for it in order.items:
        items.append(OrderItemOut(
            id=it.id,
            product_id=it.product_id,
            product_name=it.product.name if it.product else "Deleted product",
            product_image=it.product.image if it.product else None,
            quantity=it.quantity,
            price_at_time=it.price_at_time,
            line_total=round(it.quantity * it.price_at_time, 2),
        ))
    return OrderResponse(
        id=order.id,
        user_id=order.user_id,
        status=order.status.value,
        subtotal=order.subtotal,
        shipping_cost=order.shipping_cost,
        tax=order.tax,
        discount=order.discount or 0.0,
        total=order.total,
        payment=order.payment,
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=items,
        shipping=ShippingOut.model_validate(order.shipping) if order.shipping else None,
    )

# Checkout: order header, items and shipping are written in one transaction
@router.post("", response_model=OrderCreated, status_code=status.HTTP_201_CREATED)
def create_order(
    payload: OrderCreatePayload,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    order = order_service.create_order(
        db, current_user.id, payload.items, payload.shipping, payload.payment, payload.promo_code,
    )
    write_log(
        db, user_id=current_user.id, action="ORDER_CREATE", resource="orders", ip=client_ip(request),
        meta={"order_id": order.id, "total": order.total, "items": len(payload.items), "promo": payload.promo_code},
    )
    return OrderCreated(order_id=order.id, status=order.status.value, total=order.total)

# List the caller's orders, newest first
@router.get("/list", response_model=OrderList)
def list_my_orders(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    orders = order_service.list_orders(db, current_user.id)
    return {"orders": [_order_to_out(o) for o in orders]}

# Customer confirms receipt of a delivered order
@router.patch("/complete")
def complete_order(
    payload: OrderComplete,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    order = order_service.complete_order(db, payload.order_id, current_user.id)
    write_log(db, user_id=current_user.id, action="ORDER_COMPLETE", resource="orders",
              ip=client_ip(request), meta={"order_id": order.id})
    return {"success": True, "status": order.status.value}

# Get details of a specific order (owner or admin)
@router.get("/{order_id}", response_model=OrderEnvelope)
def get_order_detail(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    order = order_service.get_order_for(db, order_id, current_user)
    return {"order": _order_to_out(order)}
