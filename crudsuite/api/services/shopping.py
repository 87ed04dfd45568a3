"""
Shopping mall service.
Catalog, cart, multi-seller checkout, order lifecycle, shipments and reviews.
"""

import logging
from collections import OrderedDict
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import List
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from ...db.shopping import (
    Address,
    CartItem,
    Customer,
    Order,
    OrderItem,
    OrderStatusHistory,
    Product,
    ProductCategory,
    Review,
    Seller,
    Shipment,
    ShoppingAdmin,
)
from ..authorization import Role
from ..errors import ConflictError, ForbiddenError, InvalidRequestError, ResourceNotFoundError
from ..pagination import Page, between, conjunction, contains, equals, paginate, resolve_order
from ..schemas import shopping as schemas
from .accounts import AccountService

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
TAX_RATE = Decimal("0.10")
MINIMUM_ORDER_TOTAL = Decimal("5.00")
REVIEW_EDIT_WINDOW = timedelta(days=30)

SHIPPING_COSTS = {
    "standard": Decimal("5.99"),
    "express": Decimal("15.99"),
    "overnight": Decimal("29.99"),
    "free_shipping": Decimal("0.00"),
}

CANCELLABLE_STATUSES = ("payment_confirmed", "preparing")
SHIPMENT_PROGRESSION = ["pending", "in_transit", "delivered"]

customers = AccountService(Customer, Role.SHOPPING_CUSTOMER)
sellers = AccountService(Seller, Role.SHOPPING_SELLER)
admins = AccountService(ShoppingAdmin, Role.SHOPPING_ADMIN)


def money(value) -> Decimal:
    """Quantize to cents, rounding half up."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def _history(order: Order, previous: str, new: str, reason: str, system: bool = True) -> OrderStatusHistory:
    return OrderStatusHistory(
        order_id=order.id,
        previous_status=previous,
        new_status=new,
        change_reason=reason,
        is_system_generated=system,
        created_at=datetime.utcnow(),
    )


def _set_order_status(db: Session, order: Order, status: str, reason: str, system: bool = True) -> None:
    db.add(_history(order, order.status, status, reason, system))
    order.status = status


# Sellers

def set_seller_approval(db: Session, seller_id: UUID, request: schemas.SellerApproval) -> Seller:
    seller = db.query(Seller).filter(Seller.id == seller_id, Seller.deleted_at.is_(None)).first()
    if seller is None:
        raise ResourceNotFoundError("Seller", seller_id)

    seller.approval_status = request.approval_status
    db.commit()
    db.refresh(seller)
    logger.info(f"Seller approval changed: id={seller.id} status={seller.approval_status}")
    return seller


# Categories

def create_category(db: Session, request: schemas.CategoryCreate) -> ProductCategory:
    if db.query(ProductCategory).filter(ProductCategory.name == request.name).first():
        raise ConflictError("Category already exists", {"name": request.name})

    category = ProductCategory(**request.model_dump())
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def search_categories(db: Session, request: schemas.CategoryRequest) -> Page[schemas.Category]:
    query = db.query(ProductCategory).filter(
        *conjunction(
            equals(ProductCategory.is_active, request.is_active),
            contains([ProductCategory.name, ProductCategory.description], request.search),
        )
    )
    order_by = resolve_order(
        {"name": ProductCategory.name, "created_at": ProductCategory.created_at},
        request.sort_by,
        request.sort_direction,
        default="name",
        default_direction="asc",
        tie_breaker=ProductCategory.id,
    )
    return paginate(query, request, schemas.Category, order_by)


# Products

def _get_active_category(db: Session, category_id: UUID) -> ProductCategory:
    category = db.query(ProductCategory).filter(ProductCategory.id == category_id).first()
    if category is None or not category.is_active:
        raise ResourceNotFoundError("Category", category_id)
    return category


def create_product(db: Session, seller: Seller, request: schemas.ProductCreate) -> Product:
    if seller.approval_status != "approved":
        raise ForbiddenError("Seller account is awaiting approval")
    _get_active_category(db, request.category_id)

    product = Product(seller_id=seller.id, **request.model_dump())
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def _get_own_product(db: Session, seller: Seller, product_id: UUID) -> Product:
    product = db.query(Product).filter(Product.id == product_id, Product.deleted_at.is_(None)).first()
    if product is None:
        raise ResourceNotFoundError("Product", product_id)
    if product.seller_id != seller.id:
        raise ForbiddenError("Only the owning seller can modify this product")
    return product


def update_product(db: Session, seller: Seller, product_id: UUID, request: schemas.ProductUpdate) -> Product:
    product = _get_own_product(db, seller, product_id)
    changes = request.model_dump(exclude_unset=True, exclude_none=True)
    if "category_id" in changes:
        _get_active_category(db, changes["category_id"])
    for field, value in changes.items():
        setattr(product, field, value)
    db.commit()
    db.refresh(product)
    return product


def delete_product(db: Session, seller: Seller, product_id: UUID) -> None:
    product = _get_own_product(db, seller, product_id)
    product.deleted_at = datetime.utcnow()
    db.query(CartItem).filter(CartItem.product_id == product.id).delete(synchronize_session=False)
    db.commit()


def get_product(db: Session, product_id: UUID) -> Product:
    product = (
        db.query(Product)
        .filter(Product.id == product_id, Product.deleted_at.is_(None), Product.status == "active")
        .first()
    )
    if product is None:
        raise ResourceNotFoundError("Product", product_id)
    return product


def search_products(db: Session, request: schemas.ProductRequest) -> Page[schemas.Product]:
    stock = None
    if request.in_stock is True:
        stock = Product.stock_quantity > 0
    elif request.in_stock is False:
        stock = Product.stock_quantity == 0

    query = db.query(Product).filter(
        Product.deleted_at.is_(None),
        Product.status == "active",
        *conjunction(
            equals(Product.category_id, request.category_id),
            equals(Product.seller_id, request.seller_id),
            between(Product.price, request.min_price, request.max_price),
            contains([Product.name, Product.description], request.search),
            stock,
        ),
    )
    order_by = resolve_order(
        {"created_at": Product.created_at, "price": Product.price, "name": Product.name},
        request.sort_by,
        request.sort_direction,
        default="created_at",
        tie_breaker=Product.id,
    )
    return paginate(query, request, schemas.Product, order_by)


# Addresses

def create_address(db: Session, customer: Customer, request: schemas.AddressCreate) -> Address:
    address = Address(customer_id=customer.id, **request.model_dump())
    db.add(address)
    db.commit()
    db.refresh(address)
    return address


# Cart

def _purchasable(db: Session, product_id: UUID) -> Product:
    product = db.query(Product).filter(Product.id == product_id, Product.deleted_at.is_(None)).first()
    if product is None:
        raise ResourceNotFoundError("Product", product_id)
    if product.status != "active":
        raise InvalidRequestError("Product is not available for purchase", {"product_id": str(product_id)})
    return product


def _check_stock(product: Product, quantity: int) -> None:
    if quantity > product.stock_quantity:
        raise InvalidRequestError(
            f"Insufficient stock for {product.name}",
            {"product_id": str(product.id), "available": product.stock_quantity},
        )


def get_cart(db: Session, customer: Customer) -> schemas.Cart:
    items = (
        db.query(CartItem)
        .filter(CartItem.customer_id == customer.id)
        .order_by(CartItem.created_at.asc(), CartItem.id.asc())
        .all()
    )
    lines = []
    subtotal = Decimal("0.00")
    for item in items:
        line_total = money(item.product.price * item.quantity)
        subtotal += line_total
        lines.append(
            schemas.CartItem(
                id=item.id,
                product_id=item.product_id,
                product_name=item.product.name,
                unit_price=item.product.price,
                quantity=item.quantity,
                line_total=line_total,
            )
        )
    return schemas.Cart(items=lines, item_count=sum(i.quantity for i in items), subtotal=money(subtotal))


def add_cart_item(db: Session, customer: Customer, request: schemas.CartItemCreate) -> schemas.Cart:
    """Add a product to the cart, merging with an existing line."""
    product = _purchasable(db, request.product_id)

    item = (
        db.query(CartItem)
        .filter(CartItem.customer_id == customer.id, CartItem.product_id == product.id)
        .first()
    )
    quantity = request.quantity + (item.quantity if item else 0)
    _check_stock(product, quantity)

    if item:
        item.quantity = quantity
    else:
        db.add(CartItem(customer_id=customer.id, product_id=product.id, quantity=quantity))
    db.commit()
    return get_cart(db, customer)


def _get_own_cart_item(db: Session, customer: Customer, item_id: UUID) -> CartItem:
    item = db.query(CartItem).filter(CartItem.id == item_id, CartItem.customer_id == customer.id).first()
    if item is None:
        raise ResourceNotFoundError("CartItem", item_id)
    return item


def update_cart_item(db: Session, customer: Customer, item_id: UUID, request: schemas.CartItemUpdate) -> schemas.Cart:
    item = _get_own_cart_item(db, customer, item_id)
    _check_stock(_purchasable(db, item.product_id), request.quantity)
    item.quantity = request.quantity
    db.commit()
    return get_cart(db, customer)


def remove_cart_item(db: Session, customer: Customer, item_id: UUID) -> None:
    db.delete(_get_own_cart_item(db, customer, item_id))
    db.commit()


# Checkout

def _next_order_sequence(db: Session, prefix: str) -> int:
    return db.query(Order).filter(Order.order_number.like(f"{prefix}%")).count() + 1


def checkout(db: Session, customer: Customer, request: schemas.CheckoutRequest) -> List[Order]:
    """
    Turn the cart into one order per seller.

    All orders from one checkout share a checkout_transaction_id. Each order
    pays its own shipping, 10% tax on its subtotal, and starts out as
    payment_confirmed.
    """
    address = (
        db.query(Address)
        .filter(
            Address.id == request.delivery_address_id,
            Address.customer_id == customer.id,
            Address.deleted_at.is_(None),
        )
        .first()
    )
    if address is None:
        raise ResourceNotFoundError("Address", request.delivery_address_id)

    items = (
        db.query(CartItem)
        .filter(CartItem.customer_id == customer.id)
        .order_by(CartItem.created_at.asc(), CartItem.id.asc())
        .all()
    )
    if not items:
        raise InvalidRequestError("Cart is empty")

    by_seller = OrderedDict()
    for item in items:
        product = item.product
        if product is None or product.deleted_at is not None or product.status != "active":
            raise InvalidRequestError("Product is not available for purchase", {"product_id": str(item.product_id)})
        _check_stock(product, item.quantity)
        by_seller.setdefault(product.seller_id, []).append(item)

    shipping_cost = SHIPPING_COSTS[request.shipping_method]
    totals = {}
    for seller_id, lines in by_seller.items():
        subtotal = money(sum(line.product.price * line.quantity for line in lines))
        tax = money(subtotal * TAX_RATE)
        totals[seller_id] = (subtotal, tax, money(subtotal + tax + shipping_cost))

    grand_total = sum(total for _, _, total in totals.values())
    if grand_total < MINIMUM_ORDER_TOTAL:
        raise InvalidRequestError(
            f"Order total must be at least ${MINIMUM_ORDER_TOTAL}", {"total": str(grand_total)}
        )

    now = datetime.utcnow()
    prefix = f"ORD-{now.strftime('%Y%m%d')}-"
    sequence = _next_order_sequence(db, prefix)
    transaction_id = uuid4()

    orders = []
    for seller_id, lines in by_seller.items():
        subtotal, tax, total = totals[seller_id]
        order = Order(
            customer_id=customer.id,
            seller_id=seller_id,
            order_number=f"{prefix}{sequence:06d}",
            checkout_transaction_id=transaction_id,
            status="payment_confirmed",
            shipping_method=request.shipping_method,
            subtotal=subtotal,
            shipping_cost=shipping_cost,
            tax_amount=tax,
            total_amount=total,
            currency="USD",
            delivery_recipient_name=address.recipient_name,
            delivery_phone=address.phone,
            delivery_address_line1=address.address_line1,
            delivery_address_line2=address.address_line2,
            delivery_city=address.city,
            delivery_state_province=address.state_province,
            delivery_postal_code=address.postal_code,
            delivery_country=address.country,
            payment_confirmed_at=now,
        )
        db.add(order)
        db.flush()
        sequence += 1

        for line in lines:
            db.add(
                OrderItem(
                    order_id=order.id,
                    product_id=line.product_id,
                    product_name=line.product.name,
                    quantity=line.quantity,
                    unit_price=line.product.price,
                )
            )
            line.product.stock_quantity = line.product.stock_quantity - line.quantity

        db.add(_history(order, None, "payment_confirmed", "Order placed and payment confirmed"))
        orders.append(order)

    for item in items:
        db.delete(item)
    db.commit()

    for order in orders:
        db.refresh(order)
    logger.info(
        f"Checkout complete: customer={customer.id} orders={len(orders)} total={grand_total} "
        f"transaction={transaction_id}"
    )
    return orders


# Orders

def _search_orders(db: Session, request: schemas.OrderRequest, *scope) -> Page[schemas.Order]:
    query = db.query(Order).filter(
        *scope,
        *conjunction(
            equals(Order.status, request.status),
            between(Order.created_at, request.created_from, request.created_to),
        ),
    )
    order_by = resolve_order(
        {"created_at": Order.created_at, "total_amount": Order.total_amount},
        request.sort_by,
        request.sort_direction,
        default="created_at",
        tie_breaker=Order.id,
    )
    return paginate(query, request, schemas.Order, order_by)


def search_customer_orders(db: Session, customer: Customer, request: schemas.OrderRequest) -> Page[schemas.Order]:
    return _search_orders(db, request, Order.customer_id == customer.id)


def search_seller_orders(db: Session, seller: Seller, request: schemas.OrderRequest) -> Page[schemas.Order]:
    return _search_orders(db, request, Order.seller_id == seller.id)


def search_all_orders(db: Session, request: schemas.OrderRequest) -> Page[schemas.Order]:
    return _search_orders(db, request)


def get_customer_order(db: Session, customer: Customer, order_id: UUID) -> Order:
    order = db.query(Order).filter(Order.id == order_id, Order.customer_id == customer.id).first()
    if order is None:
        raise ResourceNotFoundError("Order", order_id)
    return order


def get_seller_order(db: Session, seller: Seller, order_id: UUID) -> Order:
    order = db.query(Order).filter(Order.id == order_id, Order.seller_id == seller.id).first()
    if order is None:
        raise ResourceNotFoundError("Order", order_id)
    return order


def cancel_order(db: Session, customer: Customer, order_id: UUID, request: schemas.OrderCancel) -> Order:
    """Cancel before shipment and put the stock back."""
    order = get_customer_order(db, customer, order_id)
    if order.status not in CANCELLABLE_STATUSES:
        raise ConflictError(f"Order cannot be cancelled once {order.status}", {"status": order.status})

    for item in order.items:
        product = db.query(Product).filter(Product.id == item.product_id).first()
        if product is not None:
            product.stock_quantity = product.stock_quantity + item.quantity

    _set_order_status(db, order, "cancelled", request.reason or "Cancelled by customer", system=False)
    order.cancelled_at = datetime.utcnow()
    db.commit()
    db.refresh(order)
    logger.info(f"Order cancelled: id={order.id} number={order.order_number}")
    return order


# Shipments

def create_shipment(db: Session, seller: Seller, request: schemas.ShipmentCreate) -> Shipment:
    order = get_seller_order(db, seller, request.order_id)
    if order.status == "cancelled":
        raise InvalidRequestError("Cannot ship a cancelled order")
    if db.query(Shipment).filter(Shipment.order_id == order.id).first():
        raise ConflictError("Order already has a shipment")

    now = datetime.utcnow()
    shipment = Shipment(
        order_id=order.id,
        seller_id=seller.id,
        carrier_name=request.carrier_name,
        tracking_number=request.tracking_number,
        status="pending",
        shipped_at=now,
    )
    db.add(shipment)
    _set_order_status(db, order, "shipped", f"Shipped via {request.carrier_name}")
    db.commit()
    db.refresh(shipment)
    return shipment


def update_shipment(db: Session, seller: Seller, shipment_id: UUID, request: schemas.ShipmentUpdate) -> Shipment:
    shipment = (
        db.query(Shipment)
        .filter(Shipment.id == shipment_id, Shipment.seller_id == seller.id)
        .first()
    )
    if shipment is None:
        raise ResourceNotFoundError("Shipment", shipment_id)

    current = SHIPMENT_PROGRESSION.index(shipment.status)
    target = SHIPMENT_PROGRESSION.index(request.status)
    if target <= current:
        raise InvalidRequestError(f"Cannot move shipment from {shipment.status} to {request.status}")

    shipment.status = request.status
    if request.status == "delivered":
        shipment.delivered_at = datetime.utcnow()
        order = db.query(Order).filter(Order.id == shipment.order_id).first()
        _set_order_status(db, order, "delivered", "Shipment delivered")

    db.commit()
    db.refresh(shipment)
    return shipment


def search_shipments(db: Session, seller: Seller, request: schemas.ShipmentRequest) -> Page[schemas.Shipment]:
    query = db.query(Shipment).filter(
        Shipment.seller_id == seller.id,
        *conjunction(
            equals(Shipment.status, request.status),
            equals(Shipment.carrier_name, request.carrier_name),
            contains([Shipment.tracking_number], request.tracking_number),
        ),
    )
    order_by = resolve_order(
        {
            "created_at": Shipment.created_at,
            "shipped_at": Shipment.shipped_at,
            "carrier_name": Shipment.carrier_name,
            "status": Shipment.status,
        },
        request.sort_by,
        request.sort_direction,
        default="created_at",
        tie_breaker=Shipment.id,
    )
    return paginate(query, request, schemas.Shipment, order_by)


def get_order_shipment(db: Session, customer: Customer, order_id: UUID) -> Shipment:
    order = get_customer_order(db, customer, order_id)
    shipment = db.query(Shipment).filter(Shipment.order_id == order.id).first()
    if shipment is None:
        raise ResourceNotFoundError("Shipment", order_id)
    return shipment


# Reviews

def create_review(db: Session, customer: Customer, product_id: UUID, request: schemas.ReviewCreate) -> Review:
    product = get_product(db, product_id)

    order = (
        db.query(Order)
        .join(OrderItem, OrderItem.order_id == Order.id)
        .filter(
            Order.customer_id == customer.id,
            Order.status != "cancelled",
            OrderItem.product_id == product.id,
        )
        .order_by(Order.created_at.desc())
        .first()
    )
    if order is None:
        raise ForbiddenError("You can only review products you have purchased")

    existing = (
        db.query(Review)
        .filter(
            Review.customer_id == customer.id,
            Review.product_id == product.id,
            Review.deleted_at.is_(None),
        )
        .first()
    )
    if existing:
        raise ConflictError("You have already reviewed this product")

    review = Review(
        customer_id=customer.id,
        product_id=product.id,
        order_id=order.id,
        rating=request.rating,
        title=request.title,
        body=request.body,
        verified_purchase=True,
    )
    db.add(review)
    db.commit()
    db.refresh(review)
    return review


def _get_own_review(db: Session, customer: Customer, review_id: UUID) -> Review:
    review = db.query(Review).filter(Review.id == review_id, Review.deleted_at.is_(None)).first()
    if review is None:
        raise ResourceNotFoundError("Review", review_id)
    if review.customer_id != customer.id:
        raise ForbiddenError("Only the author can modify this review")
    return review


def update_review(db: Session, customer: Customer, review_id: UUID, request: schemas.ReviewUpdate) -> Review:
    review = _get_own_review(db, customer, review_id)
    if datetime.utcnow() - review.created_at > REVIEW_EDIT_WINDOW:
        raise InvalidRequestError("Reviews can only be edited within 30 days of posting")

    for field, value in request.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(review, field, value)
    db.commit()
    db.refresh(review)
    return review


def delete_review(db: Session, customer: Customer, review_id: UUID) -> None:
    review = _get_own_review(db, customer, review_id)
    review.deleted_at = datetime.utcnow()
    db.commit()


def get_review(db: Session, review_id: UUID) -> Review:
    review = db.query(Review).filter(Review.id == review_id, Review.deleted_at.is_(None)).first()
    if review is None:
        raise ResourceNotFoundError("Review", review_id)
    return review


def search_reviews(db: Session, product_id: UUID, request: schemas.ReviewRequest) -> Page[schemas.Review]:
    get_product(db, product_id)
    query = db.query(Review).filter(
        Review.product_id == product_id,
        Review.deleted_at.is_(None),
        *conjunction(
            between(Review.rating, request.min_rating, request.max_rating),
            equals(Review.verified_purchase, True if request.verified_only else None),
        ),
    )
    order_by = resolve_order(
        {"created_at": Review.created_at, "rating": [Review.rating, Review.created_at]},
        request.sort_by,
        request.sort_direction,
        default="created_at",
        tie_breaker=Review.id,
    )
    return paginate(query, request, schemas.Review, order_by)
