# storefront/routes/cards.py
from fastapi import APIRouter, Depends, Request, Query, status
from sqlalchemy.orm import Session
from storefront.database import get_db
from storefront.utils.tokenJWT import get_current_user
from storefront.utils.audit import write_log, client_ip
from storefront.models.users import User
from storefront.schemas.card import CardCreate, CardDefault, CardList, CardOut
from storefront.services import cards as card_service

# The card owner is always the authenticated user; ids from the request never select another account
router = APIRouter(prefix="/api/setting/user/cards", tags=["Payment cards"])

@router.get("", response_model=CardList)
def list_cards(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return {"cards": card_service.list_cards(db, current_user.id)}

@router.post("", response_model=CardOut, status_code=status.HTTP_201_CREATED)
def add_card(
    payload: CardCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    card = card_service.add_card(db, current_user.id, **payload.model_dump())
    write_log(db, user_id=current_user.id, action="CARD_ADD", resource="cards",
              ip=client_ip(request), meta={"card_id": card.id, "brand": card.card_brand})
    db.refresh(card)
    return card

@router.patch("", response_model=CardOut)
def set_default_card(
    payload: CardDefault,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return card_service.set_default(db, current_user.id, payload.card_id)

@router.delete("")
def delete_card(
    request: Request,
    card_id: int = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    card_service.delete_card(db, current_user.id, card_id)
    write_log(db, user_id=current_user.id, action="CARD_DELETE", resource="cards",
              ip=client_ip(request), meta={"card_id": card_id})
    return {"success": True}
