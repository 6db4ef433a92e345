# storefront/routes/shop.py
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.product import Product, Category
from storefront.schemas.product import (
    CategoryList, CategoryWithCount, CategoryDetail, CategoryOut, ProductSummary, ProductOut, ProductPage,
)
from storefront.utils.pagination import normalize_paging, page_meta

router = APIRouter(prefix="/api", tags=["Shop"])


# All categories with the number of products in each
@router.get("/categories/fetch", response_model=CategoryList)
def list_categories(db: Session = Depends(get_db)):
    counts = dict(
        db.query(Product.category_id, func.count(Product.id))
        .filter(Product.category_id != None)
        .group_by(Product.category_id)
        .all()
    )
    categories = db.query(Category).order_by(Category.name.asc()).all()
    return {
        "categories": [
            CategoryWithCount(**CategoryOut.model_validate(c).model_dump(), product_count=counts.get(c.id, 0))
            for c in categories
        ]
    }


@router.get("/categories/{slug}", response_model=CategoryDetail)
def get_category(slug: str, db: Session = Depends(get_db)):
    category = db.query(Category).filter(Category.slug == slug).first()
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")

    products = db.query(Product).filter(Product.category_id == category.id).order_by(Product.id).all()
    return {
        "category": CategoryOut.model_validate(category),
        "products": [ProductSummary.model_validate(p) for p in products],
    }


# Paginated product search by name, status and category
@router.get("/products/search", response_model=ProductPage)
def search_products(
    page: Optional[str] = Query("1"),
    limit: Optional[str] = Query("10"),
    search: Optional[str] = Query(None, description="Search by product name"),
    status: Optional[str] = Query(None, description="Filter by status"),
    category: Optional[str] = Query(None, description="Category slug or id"),
    db: Session = Depends(get_db),
):
    page_no, page_size = normalize_paging(page, limit)
    query = db.query(Product)

    if search:
        query = query.filter(Product.name.ilike(f"%{search}%"))
    if status:
        query = query.filter(Product.status == status)
    if category:
        if category.isdigit():
            query = query.filter(Product.category_id == int(category))
        else:
            query = query.join(Category).filter(Category.slug == category)

    total = query.count()
    rows = query.order_by(Product.id).offset((page_no - 1) * page_size).limit(page_size).all()
    return {
        "data": [ProductOut.model_validate(p) for p in rows],
        "meta": page_meta(total, page_no, page_size),
    }


@router.get("/products/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
