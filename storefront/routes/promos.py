# storefront/routes/promos.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from storefront.database import get_db
from storefront.utils.tokenJWT import get_current_user
from storefront.utils.audit import write_log, client_ip
from storefront.models.users import User
from storefront.schemas.promo import PromoApply, PromoApplyResponse
from storefront.services import promos as promo_service

router = APIRouter(prefix="/api/promos", tags=["Promos"])

# Preview a promo code against the current subtotal; nothing is redeemed here
@router.post("/apply", response_model=PromoApplyResponse)
def apply_promo(
    payload: PromoApply,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    quote = promo_service.evaluate(db, current_user.id, payload.code, payload.subtotal)
    write_log(db, user_id=current_user.id, action="PROMO_APPLY", resource="promos",
              ip=client_ip(request), meta={"code": quote.code, "subtotal": payload.subtotal, "discount": quote.discount})
    return PromoApplyResponse(promo_id=quote.promo_id, discount=quote.discount, final_subtotal=quote.final_subtotal)
