# storefront/routes/products.py
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.utils.tokenJWT import admin_required
from storefront.utils.audit import write_log, client_ip
from storefront.utils.pagination import normalize_paging, page_meta
from storefront.models.users import User
from storefront.models.product import Product, Category
from storefront.models.cart import CartItem
from storefront.models.favorite import Favorite
from storefront.schemas.product import ProductWrite, ProductOut, ProductPage

router = APIRouter(prefix="/api/admin/products", tags=["Admin products"])


def _get_product_or_404(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def _check_category(db: Session, category_id: Optional[int]):
    if category_id is not None and not db.query(Category.id).filter(Category.id == category_id).first():
        raise HTTPException(status_code=400, detail="Unknown category")


# =========================
# PRODUCT LIST
# =========================
@router.get("", response_model=ProductPage)
def list_products(
    page: Optional[str] = Query("1"),
    limit: Optional[str] = Query("10"),
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    category: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    page_no, page_size = normalize_paging(page, limit)
    query = db.query(Product)

    if search: query = query.filter(Product.name.ilike(f"%{search}%"))
    if status: query = query.filter(Product.status == status)
    if category is not None: query = query.filter(Product.category_id == category)

    total = query.count()
    rows = query.order_by(Product.id.desc()).offset((page_no - 1) * page_size).limit(page_size).all()
    return {"data": [ProductOut.model_validate(p) for p in rows], "meta": page_meta(total, page_no, page_size)}


# =========================
# ADD PRODUCT
# =========================
@router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
def add_product(
    payload: ProductWrite,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    _check_category(db, payload.category_id)

    product = Product(**payload.model_dump())
    db.add(product)
    db.commit()
    db.refresh(product)

    write_log(db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
              ip=client_ip(request), meta={"product_id": product.id, "name": product.name})
    db.refresh(product)
    return product


# =========================
# SINGLE PRODUCT
# =========================
@router.get("/{product_id}", response_model=ProductOut)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    return _get_product_or_404(db, product_id)


@router.put("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: int,
    payload: ProductWrite,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    product = _get_product_or_404(db, product_id)
    _check_category(db, payload.category_id)

    changes = payload.model_dump()
    for field, value in changes.items():
        setattr(product, field, value)
    db.commit()

    write_log(db, user_id=current_user.id, action="PRODUCT_UPDATE", resource="products",
              ip=client_ip(request), meta={"product_id": product_id, "fields": sorted(changes)})
    db.refresh(product)
    return product


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    product = _get_product_or_404(db, product_id)
    name = product.name
    # Carts and favorites let go of the product; order history keeps it
    db.query(CartItem).filter(CartItem.product_id == product_id).delete(synchronize_session=False)
    db.query(Favorite).filter(Favorite.product_id == product_id).delete(synchronize_session=False)
    db.delete(product)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Product is referenced by orders")

    write_log(db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products",
              ip=client_ip(request), meta={"product_id": product_id, "name": name})
    return {"message": f'Product "{name}" deleted successfully'}
