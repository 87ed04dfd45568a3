"""
Shopping Mall Endpoints
Catalog, cart, checkout, orders, shipments and reviews.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ...db.shopping import Customer, Seller, ShoppingAdmin
from ..authorization import shopping_admin, shopping_customer, shopping_seller
from ..dependencies import get_db
from ..pagination import Page
from ..schemas import shopping as schemas
from ..schemas.auth import ErrorResponse
from ..services import shopping as service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/shoppingMall", tags=["shopping-mall"])

FORBIDDEN = {403: {"model": ErrorResponse, "description": "Not authorized for this role"}}
NOT_FOUND = {404: {"model": ErrorResponse, "description": "Resource not found"}}
INVALID = {400: {"model": ErrorResponse, "description": "Business rule violated"}}
CONFLICT = {409: {"model": ErrorResponse, "description": "Conflicts with current state"}}


# Sellers and categories (admin)

@router.put(
    "/admin/sellers/{seller_id}/approval",
    response_model=schemas.Seller,
    responses={**FORBIDDEN, **NOT_FOUND},
)
async def set_seller_approval(
    seller_id: UUID,
    request: schemas.SellerApproval,
    admin: ShoppingAdmin = Depends(shopping_admin),
    db: Session = Depends(get_db),
):
    """Approve or reject a seller. Rejected sellers can no longer authorize."""
    return service.set_seller_approval(db, seller_id, request)


@router.post(
    "/admin/categories",
    response_model=schemas.Category,
    status_code=status.HTTP_201_CREATED,
    responses={**FORBIDDEN, **CONFLICT},
)
async def create_category(
    request: schemas.CategoryCreate,
    admin: ShoppingAdmin = Depends(shopping_admin),
    db: Session = Depends(get_db),
):
    return service.create_category(db, request)


@router.patch("/categories", response_model=Page[schemas.Category])
async def search_categories(request: schemas.CategoryRequest, db: Session = Depends(get_db)):
    return service.search_categories(db, request)


# Products

@router.post(
    "/seller/products",
    response_model=schemas.Product,
    status_code=status.HTTP_201_CREATED,
    responses={**FORBIDDEN, **NOT_FOUND},
)
async def create_product(
    request: schemas.ProductCreate,
    seller: Seller = Depends(shopping_seller),
    db: Session = Depends(get_db),
):
    return service.create_product(db, seller, request)


@router.put("/seller/products/{product_id}", response_model=schemas.Product, responses={**FORBIDDEN, **NOT_FOUND})
async def update_product(
    product_id: UUID,
    request: schemas.ProductUpdate,
    seller: Seller = Depends(shopping_seller),
    db: Session = Depends(get_db),
):
    return service.update_product(db, seller, product_id, request)


@router.delete(
    "/seller/products/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**FORBIDDEN, **NOT_FOUND},
)
async def delete_product(
    product_id: UUID,
    seller: Seller = Depends(shopping_seller),
    db: Session = Depends(get_db),
):
    service.delete_product(db, seller, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/products", response_model=Page[schemas.Product])
async def search_products(request: schemas.ProductRequest, db: Session = Depends(get_db)):
    """Search active listings (public)."""
    return service.search_products(db, request)


@router.get("/products/{product_id}", response_model=schemas.Product, responses=NOT_FOUND)
async def get_product(product_id: UUID, db: Session = Depends(get_db)):
    return service.get_product(db, product_id)


# Addresses and cart

@router.post(
    "/customer/addresses",
    response_model=schemas.Address,
    status_code=status.HTTP_201_CREATED,
    responses=FORBIDDEN,
)
async def create_address(
    request: schemas.AddressCreate,
    customer: Customer = Depends(shopping_customer),
    db: Session = Depends(get_db),
):
    return service.create_address(db, customer, request)


@router.get("/customer/cart", response_model=schemas.Cart, responses=FORBIDDEN)
async def get_cart(customer: Customer = Depends(shopping_customer), db: Session = Depends(get_db)):
    return service.get_cart(db, customer)


@router.post(
    "/customer/cart/items",
    response_model=schemas.Cart,
    status_code=status.HTTP_201_CREATED,
    responses={**FORBIDDEN, **NOT_FOUND, **INVALID},
)
async def add_cart_item(
    request: schemas.CartItemCreate,
    customer: Customer = Depends(shopping_customer),
    db: Session = Depends(get_db),
):
    return service.add_cart_item(db, customer, request)


@router.put(
    "/customer/cart/items/{item_id}",
    response_model=schemas.Cart,
    responses={**FORBIDDEN, **NOT_FOUND, **INVALID},
)
async def update_cart_item(
    item_id: UUID,
    request: schemas.CartItemUpdate,
    customer: Customer = Depends(shopping_customer),
    db: Session = Depends(get_db),
):
    return service.update_cart_item(db, customer, item_id, request)


@router.delete(
    "/customer/cart/items/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**FORBIDDEN, **NOT_FOUND},
)
async def remove_cart_item(
    item_id: UUID,
    customer: Customer = Depends(shopping_customer),
    db: Session = Depends(get_db),
):
    service.remove_cart_item(db, customer, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Orders

@router.post(
    "/customer/orders",
    response_model=List[schemas.Order],
    status_code=status.HTTP_201_CREATED,
    responses={**FORBIDDEN, **NOT_FOUND, **INVALID},
)
async def checkout(
    request: schemas.CheckoutRequest,
    customer: Customer = Depends(shopping_customer),
    db: Session = Depends(get_db),
):
    """
    Check out the cart.

    Creates one order per seller in the cart. Returns every created order;
    they share a checkout_transaction_id.
    """
    return service.checkout(db, customer, request)


@router.patch("/customer/orders", response_model=Page[schemas.Order], responses=FORBIDDEN)
async def search_customer_orders(
    request: schemas.OrderRequest,
    customer: Customer = Depends(shopping_customer),
    db: Session = Depends(get_db),
):
    return service.search_customer_orders(db, customer, request)


@router.get("/customer/orders/{order_id}", response_model=schemas.OrderDetail, responses={**FORBIDDEN, **NOT_FOUND})
async def get_customer_order(
    order_id: UUID,
    customer: Customer = Depends(shopping_customer),
    db: Session = Depends(get_db),
):
    return service.get_customer_order(db, customer, order_id)


@router.get(
    "/customer/orders/{order_id}/history",
    response_model=List[schemas.OrderStatusHistory],
    responses={**FORBIDDEN, **NOT_FOUND},
)
async def get_order_history(
    order_id: UUID,
    customer: Customer = Depends(shopping_customer),
    db: Session = Depends(get_db),
):
    return service.get_customer_order(db, customer, order_id).history


@router.post(
    "/customer/orders/{order_id}/cancel",
    response_model=schemas.Order,
    responses={**FORBIDDEN, **NOT_FOUND, **CONFLICT},
)
async def cancel_order(
    order_id: UUID,
    request: schemas.OrderCancel,
    customer: Customer = Depends(shopping_customer),
    db: Session = Depends(get_db),
):
    return service.cancel_order(db, customer, order_id, request)


@router.get(
    "/customer/orders/{order_id}/shipment",
    response_model=schemas.Shipment,
    responses={**FORBIDDEN, **NOT_FOUND},
)
async def get_order_shipment(
    order_id: UUID,
    customer: Customer = Depends(shopping_customer),
    db: Session = Depends(get_db),
):
    return service.get_order_shipment(db, customer, order_id)


@router.patch("/seller/orders", response_model=Page[schemas.Order], responses=FORBIDDEN)
async def search_seller_orders(
    request: schemas.OrderRequest,
    seller: Seller = Depends(shopping_seller),
    db: Session = Depends(get_db),
):
    return service.search_seller_orders(db, seller, request)


@router.get("/seller/orders/{order_id}", response_model=schemas.OrderDetail, responses={**FORBIDDEN, **NOT_FOUND})
async def get_seller_order(
    order_id: UUID,
    seller: Seller = Depends(shopping_seller),
    db: Session = Depends(get_db),
):
    return service.get_seller_order(db, seller, order_id)


@router.patch("/admin/orders", response_model=Page[schemas.Order], responses=FORBIDDEN)
async def search_all_orders(
    request: schemas.OrderRequest,
    admin: ShoppingAdmin = Depends(shopping_admin),
    db: Session = Depends(get_db),
):
    return service.search_all_orders(db, request)


# Shipments

@router.post(
    "/seller/shipments",
    response_model=schemas.Shipment,
    status_code=status.HTTP_201_CREATED,
    responses={**FORBIDDEN, **NOT_FOUND, **INVALID, **CONFLICT},
)
async def create_shipment(
    request: schemas.ShipmentCreate,
    seller: Seller = Depends(shopping_seller),
    db: Session = Depends(get_db),
):
    return service.create_shipment(db, seller, request)


@router.put(
    "/seller/shipments/{shipment_id}",
    response_model=schemas.Shipment,
    responses={**FORBIDDEN, **NOT_FOUND, **INVALID},
)
async def update_shipment(
    shipment_id: UUID,
    request: schemas.ShipmentUpdate,
    seller: Seller = Depends(shopping_seller),
    db: Session = Depends(get_db),
):
    return service.update_shipment(db, seller, shipment_id, request)


@router.patch("/seller/shipments", response_model=Page[schemas.Shipment], responses=FORBIDDEN)
async def search_shipments(
    request: schemas.ShipmentRequest,
    seller: Seller = Depends(shopping_seller),
    db: Session = Depends(get_db),
):
    return service.search_shipments(db, seller, request)


# Reviews

@router.post(
    "/customer/products/{product_id}/reviews",
    response_model=schemas.Review,
    status_code=status.HTTP_201_CREATED,
    responses={**FORBIDDEN, **NOT_FOUND, **CONFLICT},
)
async def create_review(
    product_id: UUID,
    request: schemas.ReviewCreate,
    customer: Customer = Depends(shopping_customer),
    db: Session = Depends(get_db),
):
    return service.create_review(db, customer, product_id, request)


@router.put(
    "/customer/reviews/{review_id}",
    response_model=schemas.Review,
    responses={**FORBIDDEN, **NOT_FOUND, **INVALID},
)
async def update_review(
    review_id: UUID,
    request: schemas.ReviewUpdate,
    customer: Customer = Depends(shopping_customer),
    db: Session = Depends(get_db),
):
    return service.update_review(db, customer, review_id, request)


@router.delete(
    "/customer/reviews/{review_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**FORBIDDEN, **NOT_FOUND},
)
async def delete_review(
    review_id: UUID,
    customer: Customer = Depends(shopping_customer),
    db: Session = Depends(get_db),
):
    service.delete_review(db, customer, review_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/products/{product_id}/reviews", response_model=Page[schemas.Review], responses=NOT_FOUND)
async def search_reviews(product_id: UUID, request: schemas.ReviewRequest, db: Session = Depends(get_db)):
    return service.search_reviews(db, product_id, request)


@router.get("/reviews/{review_id}", response_model=schemas.Review, responses=NOT_FOUND)
async def get_review(review_id: UUID, db: Session = Depends(get_db)):
    return service.get_review(db, review_id)
