from pydantic import BaseModel, Field, ConfigDict, EmailStr
from typing import List, Optional, Any
from datetime import datetime

from storefront.schemas.user import PageMeta


# A line of the checkout request; the unit price is resolved server-side
class CheckoutItem(BaseModel):
    product_id: int
    quantity: int = Field(ge=1)


# Delivery details, accepting the storefront's camelCase keys
class ShippingIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_name: str = Field(alias="fullName", min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    country: Optional[str] = None
    zip_code: str = Field(alias="zipCode", min_length=1)


class PaymentIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    method: str
    provider: Optional[str] = None
    transaction_id: Optional[str] = Field(default=None, alias="transactionId")
    card_number: Optional[str] = Field(default=None, alias="cardNumber")
    card_name: Optional[str] = Field(default=None, alias="cardName")
    expiry_month: Optional[int] = Field(default=None, alias="expiryMonth", ge=1, le=12)
    expiry_year: Optional[int] = Field(default=None, alias="expiryYear", ge=2000)


# Input schema for creating a new order
class OrderCreatePayload(BaseModel):
    items: List[CheckoutItem] = Field(min_length=1)
    shipping: ShippingIn
    payment: PaymentIn
    promo_code: Optional[str] = None


class OrderCreated(BaseModel):
    order_id: int
    status: str
    total: float


# Output schema for an individual order line item
class OrderItemOut(BaseModel):
    id: int
    product_id: int
    product_name: str
    product_image: Optional[str] = None
    quantity: int
    price_at_time: float
    line_total: float


class ShippingOut(BaseModel):
    full_name: str
    email: str
    phone_number: Optional[str] = None
    home_address: str
    city: str
    state: str
    zip_code: str
    country: str
    shipping_method: str
    shipping_cost: float

    class Config:
        from_attributes = True


# Output schema representing the full order details
class OrderResponse(BaseModel):
    id: int
    user_id: int
    status: str
    subtotal: float
    shipping_cost: float
    tax: float
    discount: float
    total: float
    payment: Optional[Any] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItemOut]
    shipping: Optional[ShippingOut] = None


class OrderEnvelope(BaseModel):
    order: OrderResponse


class OrderList(BaseModel):
    orders: List[OrderResponse]


class OrderComplete(BaseModel):
    order_id: int


# Schema for the admin status update
class OrderStatusUpdate(BaseModel):
    status: str
    force: bool = False


class AdminOrderRow(BaseModel):
    id: int
    user_id: int
    user_email: Optional[str] = None
    user_fullname: Optional[str] = None
    status: str
    subtotal: float
    shipping_cost: float
    tax: float
    discount: float
    total: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AdminOrdersPage(BaseModel):
    data: List[AdminOrderRow]
    meta: PageMeta
