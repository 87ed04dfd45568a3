"""
Shopping mall ORM models.
Sellers list products, customers check out their cart into one order per
seller, sellers ship orders, and customers review what they bought.
"""

from uuid import uuid4

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, Uuid,
)
from sqlalchemy.orm import relationship

from .base import AccountMixin, Base, SoftDeleteMixin, TimestampMixin


class Customer(AccountMixin, Base):
    __tablename__ = "shopping_mall_customers"

    full_name = Column(String(100), nullable=True)
    phone = Column(String(32), nullable=True)


class Seller(AccountMixin, Base):
    __tablename__ = "shopping_mall_sellers"

    business_name = Column(String(200), nullable=False)
    contact_person_name = Column(String(100), nullable=True)
    phone = Column(String(32), nullable=True)
    approval_status = Column(String(16), nullable=False, default="pending",
                             comment="pending, approved or rejected")


class ShoppingAdmin(AccountMixin, Base):
    __tablename__ = "shopping_mall_admins"


class ProductCategory(TimestampMixin, Base):
    __tablename__ = "shopping_mall_categories"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)


class Product(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "shopping_mall_products"

    id = Column(Uuid, primary_key=True, default=uuid4)
    seller_id = Column(Uuid, ForeignKey("shopping_mall_sellers.id"), nullable=False, index=True)
    category_id = Column(Uuid, ForeignKey("shopping_mall_categories.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    stock_quantity = Column(Integer, nullable=False, default=0)
    status = Column(String(16), nullable=False, default="active", index=True)


class Address(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "shopping_mall_addresses"

    id = Column(Uuid, primary_key=True, default=uuid4)
    customer_id = Column(Uuid, ForeignKey("shopping_mall_customers.id"), nullable=False, index=True)
    recipient_name = Column(String(100), nullable=False)
    phone = Column(String(32), nullable=False)
    address_line1 = Column(String(200), nullable=False)
    address_line2 = Column(String(200), nullable=True)
    city = Column(String(100), nullable=False)
    state_province = Column(String(100), nullable=True)
    postal_code = Column(String(20), nullable=False)
    country = Column(String(100), nullable=False)


class CartItem(TimestampMixin, Base):
    __tablename__ = "shopping_mall_cart_items"

    id = Column(Uuid, primary_key=True, default=uuid4)
    customer_id = Column(Uuid, ForeignKey("shopping_mall_customers.id"), nullable=False, index=True)
    product_id = Column(Uuid, ForeignKey("shopping_mall_products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)

    product = relationship("Product")

    __table_args__ = (
        Index("idx_shopping_cart_customer_product", "customer_id", "product_id", unique=True),
    )


class Order(TimestampMixin, Base):
    __tablename__ = "shopping_mall_orders"

    id = Column(Uuid, primary_key=True, default=uuid4)
    customer_id = Column(Uuid, ForeignKey("shopping_mall_customers.id"), nullable=False, index=True)
    seller_id = Column(Uuid, ForeignKey("shopping_mall_sellers.id"), nullable=False, index=True)
    order_number = Column(String(32), unique=True, nullable=False)
    checkout_transaction_id = Column(Uuid, nullable=False, index=True)
    status = Column(String(24), nullable=False, index=True)
    shipping_method = Column(String(24), nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)
    shipping_cost = Column(Numeric(12, 2), nullable=False)
    tax_amount = Column(Numeric(12, 2), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")

    # Delivery snapshot
    delivery_recipient_name = Column(String(100), nullable=False)
    delivery_phone = Column(String(32), nullable=False)
    delivery_address_line1 = Column(String(200), nullable=False)
    delivery_address_line2 = Column(String(200), nullable=True)
    delivery_city = Column(String(100), nullable=False)
    delivery_state_province = Column(String(100), nullable=True)
    delivery_postal_code = Column(String(20), nullable=False)
    delivery_country = Column(String(100), nullable=False)

    payment_confirmed_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)

    items = relationship("OrderItem", back_populates="order", order_by="OrderItem.created_at")
    history = relationship("OrderStatusHistory", order_by="OrderStatusHistory.created_at")


class OrderItem(TimestampMixin, Base):
    __tablename__ = "shopping_mall_order_items"

    id = Column(Uuid, primary_key=True, default=uuid4)
    order_id = Column(Uuid, ForeignKey("shopping_mall_orders.id"), nullable=False, index=True)
    product_id = Column(Uuid, ForeignKey("shopping_mall_products.id"), nullable=False, index=True)
    product_name = Column(String(200), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)

    order = relationship("Order", back_populates="items")


class OrderStatusHistory(Base):
    __tablename__ = "shopping_mall_order_status_history"

    id = Column(Uuid, primary_key=True, default=uuid4)
    order_id = Column(Uuid, ForeignKey("shopping_mall_orders.id"), nullable=False, index=True)
    previous_status = Column(String(24), nullable=True)
    new_status = Column(String(24), nullable=False)
    change_reason = Column(Text, nullable=True)
    is_system_generated = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False)


class Shipment(TimestampMixin, Base):
    __tablename__ = "shopping_mall_shipments"

    id = Column(Uuid, primary_key=True, default=uuid4)
    order_id = Column(Uuid, ForeignKey("shopping_mall_orders.id"), nullable=False, unique=True)
    seller_id = Column(Uuid, ForeignKey("shopping_mall_sellers.id"), nullable=False, index=True)
    carrier_name = Column(String(64), nullable=False)
    tracking_number = Column(String(64), nullable=False, index=True)
    status = Column(String(16), nullable=False, default="pending", index=True)
    shipped_at = Column(DateTime, nullable=True)
    delivered_at = Column(DateTime, nullable=True)


class Review(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "shopping_mall_reviews"

    id = Column(Uuid, primary_key=True, default=uuid4)
    customer_id = Column(Uuid, ForeignKey("shopping_mall_customers.id"), nullable=False, index=True)
    product_id = Column(Uuid, ForeignKey("shopping_mall_products.id"), nullable=False, index=True)
    order_id = Column(Uuid, ForeignKey("shopping_mall_orders.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    title = Column(String(200), nullable=False)
    body = Column(Text, nullable=False)
    verified_purchase = Column(Boolean, nullable=False, default=False)
