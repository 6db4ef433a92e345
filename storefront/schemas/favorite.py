from pydantic import BaseModel, Field, ConfigDict
from typing import List

from storefront.schemas.product import ProductSummary

class FavoriteAdd(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(alias="productId")

class FavoriteOut(BaseModel):
    id: int
    product_id: int
    products: ProductSummary

class FavoriteList(BaseModel):
    items: List[FavoriteOut]
    count: int
