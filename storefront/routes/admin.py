# storefront/routes/admin.py
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from storefront.database import get_db
from storefront.models.users import User
from storefront.models.order import Order
from storefront.utils.tokenJWT import admin_required
from storefront.utils.audit import write_log, client_ip
from storefront.utils.pagination import normalize_paging, page_meta
from storefront.schemas.user import RoleUpdate, UsersPage
from storefront.schemas.order import OrderStatusUpdate, AdminOrderRow, AdminOrdersPage
from storefront.services import orders as order_service
from storefront.routes.orders import _order_to_out

router = APIRouter(prefix="/api/admin", tags=["Admin"])


# Retrieve a list of users with filtering and pagination
@router.get("/users", response_model=UsersPage)
def get_all_users(
    page: Optional[str] = Query("1"),
    limit: Optional[str] = Query("10"),
    search: Optional[str] = Query(None, description="Search by e-mail"),
    role: Optional[str] = Query(None, description="Filter by role"),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required)
):
    page_no, page_size = normalize_paging(page, limit)
    query = db.query(User)

    if search:
        query = query.filter(User.email.ilike(f"%{search.lower()}%"))
    if role:
        query = query.filter(User.role == role)

    total = query.count()
    users = query.order_by(User.id.asc()).offset((page_no - 1) * page_size).limit(page_size).all()
    return {"data": users, "meta": page_meta(total, page_no, page_size)}


# Update user role
@router.put("/users/{user_id}/role")
def update_user_role(
    user_id: int,
    new_role: RoleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required)
):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    # Prevent an admin from locking themselves out
    if user.id == current_user.id and new_role.role != "admin":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot demote your own account")

    user.role = new_role.role
    db.commit()
    db.refresh(user)

    return {"message": f"User {user.email} role updated to {user.role}", "id": user.id, "role": user.role}


# Paginated order list, newest first
@router.get("/orders", response_model=AdminOrdersPage)
def list_orders(
    page: Optional[str] = Query("1"),
    limit: Optional[str] = Query("10"),
    search: Optional[str] = Query(None, description="Order id, customer e-mail or name"),
    status: Optional[str] = Query(None, description="Filter by status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required)
):
    page_no, page_size = normalize_paging(page, limit)
    query = db.query(Order).join(User, Order.user_id == User.id).options(joinedload(Order.user))

    if status:
        query = query.filter(Order.status == order_service.parse_status(status))

    if search:
        term = search.strip()
        if term.isdigit():
            query = query.filter(Order.id == int(term))
        else:
            like = f"%{term}%"
            query = query.filter(or_(User.email.ilike(like), User.fullname.ilike(like)))

    total = query.count()
    rows = (query
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset((page_no - 1) * page_size)
            .limit(page_size)
            .all())

    data = [
        AdminOrderRow(
            id=o.id, user_id=o.user_id,
            user_email=o.user.email if o.user else None,
            user_fullname=o.user.fullname if o.user else None,
            status=o.status.value, subtotal=o.subtotal, shipping_cost=o.shipping_cost,
            tax=o.tax, discount=o.discount or 0.0, total=o.total,
            created_at=o.created_at, updated_at=o.updated_at,
        )
        for o in rows
    ]
    return {"data": data, "meta": page_meta(total, page_no, page_size)}


# Move an order along its lifecycle; force skips the transition table
@router.put("/orders/{order_id}/status")
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required)
):
    order, old_status = order_service.set_status(db, order_id, payload.status, force=payload.force)
    out = _order_to_out(order)

    write_log(db, user_id=current_user.id, action="ORDER_STATUS_CHANGE", resource="orders",
              ip=client_ip(request),
              meta={"order_id": order_id, "old": old_status.value, "new": out.status, "forced": payload.force})

    return {"success": True, "data": out, "message": "Order status updated successfully"}
