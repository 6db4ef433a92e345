from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

class CardCreate(BaseModel):
    card_number: str = Field(min_length=12)
    cardholder_name: str = Field(min_length=1)
    expiry_month: int = Field(ge=1, le=12)
    expiry_year: int = Field(ge=2000)
    is_default: bool = False

class CardDefault(BaseModel):
    card_id: int

class CardOut(BaseModel):
    id: int
    last4: str
    card_brand: str
    cardholder_name: str
    expiry_month: int
    expiry_year: int
    is_default: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class CardList(BaseModel):
    cards: List[CardOut]
