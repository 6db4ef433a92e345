# storefront/routes/favorites.py
from typing import Optional
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from storefront.database import get_db
from storefront.utils.tokenJWT import get_current_user, get_optional_user
from storefront.utils.audit import write_log, client_ip
from storefront.models.users import User
from storefront.schemas.cart import MessageOut
from storefront.schemas.favorite import FavoriteAdd, FavoriteList, FavoriteOut
from storefront.schemas.product import ProductSummary
from storefront.services import favorites as favorite_service

router = APIRouter(prefix="/api/favorites", tags=["Favorites"])

@router.post("/add", response_model=MessageOut)
def add_favorite(
    payload: FavoriteAdd,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    favorite = favorite_service.add_favorite(db, current_user.id, payload.product_id)
    write_log(db, user_id=current_user.id, action="FAVORITE_ADD", resource="favorites",
              ip=client_ip(request), meta={"product_id": favorite.product_id})
    return {"message": "Item added to favorites"}

@router.get("/fetch", response_model=FavoriteList)
def fetch_favorites(
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user)
):
    rows = favorite_service.list_favorites(db, current_user.id if current_user else None)
    items = [
        FavoriteOut(id=f.id, product_id=f.product_id, products=ProductSummary.model_validate(f.product))
        for f in rows
    ]
    return {"items": items, "count": len(items)}
