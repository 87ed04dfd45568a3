"""
Shopping mall request/response schemas.

Money is accepted as Decimal (two places) and rendered as float.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..pagination import PageRequest, SortDirection, UTCDateTime
from .auth import JoinRequest

ApprovalStatus = Literal["pending", "approved", "rejected"]
ProductStatus = Literal["active", "inactive"]
ShippingMethod = Literal["standard", "express", "overnight", "free_shipping"]
OrderStatus = Literal["payment_confirmed", "preparing", "shipped", "delivered", "cancelled"]
ShipmentStatus = Literal["pending", "in_transit", "delivered"]


# Accounts

class CustomerJoin(JoinRequest):
    full_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=32)


class SellerJoin(JoinRequest):
    business_name: str = Field(..., min_length=1, max_length=200)
    contact_person_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=32)


class SellerApproval(BaseModel):
    approval_status: ApprovalStatus


class Seller(BaseModel):
    id: UUID
    email: str
    business_name: str
    approval_status: ApprovalStatus
    created_at: datetime

    model_config = {"from_attributes": True}


# Categories

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    is_active: bool = True


class Category(BaseModel):
    id: UUID
    name: str
    description: Optional[str]
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class CategoryRequest(PageRequest):
    is_active: Optional[bool] = None
    search: Optional[str] = None
    sort_by: Optional[Literal["name", "created_at"]] = None
    sort_direction: Optional[SortDirection] = None


# Products

class ProductCreate(BaseModel):
    category_id: UUID
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    stock_quantity: int = Field(default=0, ge=0)
    status: ProductStatus = "active"


class ProductUpdate(BaseModel):
    category_id: Optional[UUID] = None
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    stock_quantity: Optional[int] = Field(None, ge=0)
    status: Optional[ProductStatus] = None


class Product(BaseModel):
    id: UUID
    seller_id: UUID
    category_id: UUID
    name: str
    description: Optional[str]
    price: float
    stock_quantity: int
    status: ProductStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProductRequest(PageRequest):
    category_id: Optional[UUID] = None
    seller_id: Optional[UUID] = None
    min_price: Optional[Decimal] = Field(None, ge=0)
    max_price: Optional[Decimal] = Field(None, ge=0)
    search: Optional[str] = Field(None, description="Substring of name or description")
    in_stock: Optional[bool] = None
    sort_by: Optional[Literal["created_at", "price", "name"]] = None
    sort_direction: Optional[SortDirection] = None


# Addresses

class AddressCreate(BaseModel):
    recipient_name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=1, max_length=32)
    address_line1: str = Field(..., min_length=1, max_length=200)
    address_line2: Optional[str] = Field(None, max_length=200)
    city: str = Field(..., min_length=1, max_length=100)
    state_province: Optional[str] = Field(None, max_length=100)
    postal_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field(..., min_length=1, max_length=100)


class Address(AddressCreate):
    id: UUID
    customer_id: UUID
    created_at: datetime

    model_config = {"from_attributes": True}


# Cart

class CartItemCreate(BaseModel):
    product_id: UUID
    quantity: int = Field(..., ge=1, le=999)


class CartItemUpdate(BaseModel):
    quantity: int = Field(..., ge=1, le=999)


class CartItem(BaseModel):
    id: UUID
    product_id: UUID
    product_name: str
    unit_price: float
    quantity: int
    line_total: float


class Cart(BaseModel):
    items: List[CartItem]
    item_count: int
    subtotal: float


# Orders

class CheckoutRequest(BaseModel):
    delivery_address_id: UUID
    shipping_method: ShippingMethod = "standard"


class OrderItem(BaseModel):
    id: UUID
    product_id: UUID
    product_name: str
    quantity: int
    unit_price: float

    model_config = {"from_attributes": True}


class OrderStatusHistory(BaseModel):
    id: UUID
    previous_status: Optional[str]
    new_status: str
    change_reason: Optional[str]
    is_system_generated: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class Order(BaseModel):
    id: UUID
    customer_id: UUID
    seller_id: UUID
    order_number: str
    checkout_transaction_id: UUID
    status: OrderStatus
    shipping_method: ShippingMethod
    subtotal: float
    shipping_cost: float
    tax_amount: float
    total_amount: float
    currency: str
    delivery_recipient_name: str
    delivery_city: str
    delivery_country: str
    payment_confirmed_at: Optional[datetime]
    cancelled_at: Optional[datetime]
    created_at: datetime

    model_config = {"from_attributes": True}


class OrderDetail(Order):
    items: List[OrderItem]
    history: List[OrderStatusHistory]


class OrderRequest(PageRequest):
    status: Optional[OrderStatus] = None
    created_from: Optional[UTCDateTime] = None
    created_to: Optional[UTCDateTime] = None
    sort_by: Optional[Literal["created_at", "total_amount"]] = None
    sort_direction: Optional[SortDirection] = None


class OrderCancel(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


# Shipments

class ShipmentCreate(BaseModel):
    order_id: UUID
    carrier_name: str = Field(..., min_length=1, max_length=64)
    tracking_number: str = Field(..., min_length=1, max_length=64)


class ShipmentUpdate(BaseModel):
    status: ShipmentStatus


class Shipment(BaseModel):
    id: UUID
    order_id: UUID
    seller_id: UUID
    carrier_name: str
    tracking_number: str
    status: ShipmentStatus
    shipped_at: Optional[datetime]
    delivered_at: Optional[datetime]
    created_at: datetime

    model_config = {"from_attributes": True}


class ShipmentRequest(PageRequest):
    status: Optional[ShipmentStatus] = None
    carrier_name: Optional[str] = None
    tracking_number: Optional[str] = Field(None, description="Substring of tracking number")
    sort_by: Optional[Literal["created_at", "shipped_at", "carrier_name", "status"]] = None
    sort_direction: Optional[SortDirection] = None


# Reviews

class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    title: str = Field(..., min_length=1, max_length=200)
    body: str = Field(..., min_length=1, max_length=5000)


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    body: Optional[str] = Field(None, min_length=1, max_length=5000)


class Review(BaseModel):
    id: UUID
    customer_id: UUID
    product_id: UUID
    order_id: UUID
    rating: int
    title: str
    body: str
    verified_purchase: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ReviewRequest(PageRequest):
    min_rating: Optional[int] = Field(None, ge=1, le=5)
    max_rating: Optional[int] = Field(None, ge=1, le=5)
    verified_only: bool = False
    sort_by: Optional[Literal["created_at", "rating"]] = None
    sort_direction: Optional[SortDirection] = None
