from pydantic import BaseModel, Field, ConfigDict
from typing import List

from storefront.schemas.product import ProductSummary

# Request schema for adding an item to the cart
class CartAddItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(alias="productId")
    quantity: int = Field(default=1, ge=1)

# Request schema for removing a cart line
class CartRemoveItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    item_id: int = Field(alias="itemId")

# Response schema for a single cart line item
class CartItemOut(BaseModel):
    id: int
    product_id: int
    quantity: int
    price: float # Snapshot taken when the line was created
    line_total: float
    products: ProductSummary # Live catalog data

    class Config:
        from_attributes = True

# Response schema for the whole cart
class CartOut(BaseModel):
    items: List[CartItemOut]
    count: int
    total: float

class MessageOut(BaseModel):
    message: str
