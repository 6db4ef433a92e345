from pydantic import BaseModel, Field, ConfigDict

# Request schema for previewing a promo code
class PromoApply(BaseModel):
    code: str = Field(min_length=1)
    subtotal: float = Field(ge=0)

class PromoApplyResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    promo_id: int = Field(alias="promoId")
    discount: float
    final_subtotal: float = Field(alias="finalSubtotal")
