from pydantic import BaseModel, Field
from typing import Optional

class ReviewCreate(BaseModel):
    order_id: int
    product_id: int
    rating: int = Field(ge=1, le=5)
    review: Optional[str] = Field(default=None, max_length=1000)
