# storefront/routes/reviews.py
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
from storefront.database import get_db
from storefront.utils.tokenJWT import get_current_user
from storefront.utils.audit import write_log, client_ip
from storefront.models.users import User
from storefront.schemas.review import ReviewCreate
from storefront.services.reviews import submit_review

router = APIRouter(prefix="/api/reviews", tags=["Reviews"])

@router.post("", status_code=status.HTTP_201_CREATED)
def create_review(
    payload: ReviewCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    entry = submit_review(
        db, current_user.id, payload.order_id, payload.product_id, payload.rating, payload.review,
    )
    write_log(db, user_id=current_user.id, action="REVIEW_CREATE", resource="reviews", ip=client_ip(request),
              meta={"review_id": entry.id, "order_id": payload.order_id, "product_id": payload.product_id})
    return {"message": "Review submitted successfully", "id": entry.id}
