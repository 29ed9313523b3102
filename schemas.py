"""
Database Schemas for the Storefront

Each Pydantic model represents a MongoDB collection. Collection name is the lowercase
class name (e.g., Product -> "product"). Fields are stored and sent over the wire in
camelCase; Python code uses the snake_case attribute names.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TrimmedModel(CamelModel):
    """Strips surrounding whitespace so blank strings fail min_length."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


# Collections

class User(CamelModel):
    name: str = Field(..., min_length=2)
    email: EmailStr
    password: str = Field(..., description="bcrypt hash, never returned")
    date_of_birth: str = ""
    location: str = ""
    phone: str = ""
    avatar: str = ""


class Admin(CamelModel):
    username: str = Field(..., min_length=3)
    password: str
    email: str = ""


class Product(CamelModel):
    title: str
    description: str
    image: str = Field(..., description="/uploads/products/... path or absolute URL")
    price: float = Field(ge=0)
    stock: int = Field(default=0, ge=0)
    category: str = "general"
    is_active: bool = True
    featured: bool = False


class ProductSummary(CamelModel):
    """Expanded product as embedded in cart and order line items"""
    id: str
    title: Optional[str] = None
    image: Optional[str] = None
    price: Optional[float] = None
    stock: Optional[int] = None


# A line item's product is either a raw id or an expanded product.
ProductRef = Union[str, ProductSummary]


def product_ref_id(ref: Any) -> Optional[str]:
    """Normalize a product reference to its raw string id."""
    if ref is None:
        return None
    if isinstance(ref, ProductSummary):
        return ref.id
    if isinstance(ref, dict):
        raw = ref.get("id") or ref.get("_id")
        return str(raw) if raw is not None else None
    return str(ref)


class CartItem(CamelModel):
    product: str
    quantity: int = Field(1, ge=1)


class Cart(CamelModel):
    user: str
    items: List[CartItem] = []


class OrderStatus(str, Enum):
    pending = "pending"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"


class BillingDetails(TrimmedModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    phone: str = Field(..., min_length=1)
    province: str = Field(..., min_length=1)
    district: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    street_address: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    notes: Optional[str] = None


class OrderItem(CamelModel):
    product: str
    quantity: int = Field(ge=1)
    price: float = Field(ge=0, description="unit price captured at checkout")


class Order(CamelModel):
    user: str
    items: List[OrderItem]
    billing_details: BillingDetails
    total_amount: float = Field(ge=0)
    shipping_cost: float = Field(default=0, ge=0)
    payment_method: str = "cod"
    status: OrderStatus = OrderStatus.pending


class Contact(CamelModel):
    first_name: str
    last_name: str
    email: EmailStr
    phone_number: str = ""
    subject: str = "General Inquiry"
    message: str
    is_read: bool = False


# Request payloads

class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=2)
    email: EmailStr
    password: str = Field(..., min_length=6)
    date_of_birth: Optional[str] = None
    location: Optional[str] = None


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileUpdate(TrimmedModel):
    name: Optional[str] = Field(default=None, min_length=2)
    email: Optional[EmailStr] = None
    location: Optional[str] = None
    phone: Optional[str] = None
    avatar: Optional[str] = None


class AdminLoginRequest(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ProductCreate(TrimmedModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    image: str = Field(..., min_length=1)
    price: float = Field(ge=0)
    stock: int = Field(default=0, ge=0)
    category: str = "general"
    featured: bool = False


class ProductUpdate(TrimmedModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    image: Optional[str] = Field(default=None, min_length=1)
    price: Optional[float] = Field(default=None, ge=0)
    stock: Optional[int] = Field(default=None, ge=0)
    category: Optional[str] = Field(default=None, min_length=1)
    is_active: Optional[bool] = None
    featured: Optional[bool] = None


class AddToCartRequest(CamelModel):
    product_id: str = Field(..., min_length=1)
    quantity: int = 1


class UpdateCartRequest(CamelModel):
    product_id: str = Field(..., min_length=1)
    quantity: int


class OrderItemRequest(CamelModel):
    product: Optional[str] = None
    quantity: Optional[int] = None


class CreateOrderRequest(CamelModel):
    items: List[OrderItemRequest] = []
    billing_details: BillingDetails
    payment_method: Optional[str] = None


class StatusUpdateRequest(CamelModel):
    # Kept as a plain string so unknown values reach the transition check
    status: str


class ContactCreate(TrimmedModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    phone_number: Optional[str] = None
    subject: Optional[str] = None
    message: str = Field(..., min_length=1)
