# storefront/schemas/product.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Literal

from storefront.schemas.user import PageMeta


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class CategoryOut(ORMBase):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    image: Optional[str] = None
    icon: Optional[str] = None


class CategoryWithCount(CategoryOut):
    product_count: int = 0


class CategoryList(BaseModel):
    categories: List[CategoryWithCount]


# Compact product row used in listings, carts and favorites
class ProductSummary(ORMBase):
    id: int
    name: str
    image: Optional[str] = None
    price: float
    stock: int
    discount: Optional[float] = None
    final_price: float
    rating: Optional[float] = None


class ProductOut(ProductSummary):
    description: Optional[str] = None
    status: str
    category_id: Optional[int] = None


class CategoryDetail(BaseModel):
    category: CategoryOut
    products: List[ProductSummary]


class ProductPage(BaseModel):
    data: List[ProductOut]
    meta: PageMeta


# Shared attributes for admin create/update
class ProductWrite(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    price: float = Field(ge=0)
    stock: int = Field(ge=0)
    category_id: Optional[int] = None
    status: Literal["active", "inactive"] = "active"
    image: Optional[str] = None
    discount: Optional[float] = Field(default=None, ge=0, le=100)
