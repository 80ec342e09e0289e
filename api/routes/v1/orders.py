"""
api/routes/v1/orders.py -- Order routes for the threat intel REST API.

Routes (mounted under /api/v1):
  POST /orders        -- place an order for the caller (201)
  GET  /orders        -- list the caller's orders
  GET  /orders/{id}   -- one order; owner or Analyst+ only

Status mapping:
  POST: 400 for an unknown item, insufficient permissions, or a caller whose
        account no longer exists.
  GET /orders/{id}: 400 for a non-UUID id (path validation), 404 for a
        missing order, a missing caller, or a caller without access. Access
        denial is reported as 404 so order ids cannot be probed.

Handlers are sync (def) because the stores are blocking SQLAlchemy calls;
FastAPI runs them in its thread pool.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Request

from api.models import CreateOrderRequest, OrderCreatedResponse, OrderResponse
from auth.dependencies import get_current_user
from auth.models import CurrentUser
from core.errors import (
    AccessDenied,
    InsufficientPermissions,
    InvalidItem,
    InvalidQuantityError,
    OrderNotFound,
    UserNotFound,
)
from orders.service import OrderService

# Auth policy: every order route requires a bearer token (any role).
# The router-level dependency runs before each handler; handlers that need
# the identity declare it again and FastAPI reuses the cached result.
router = APIRouter(prefix="/orders", dependencies=[Depends(get_current_user)])


@router.post("", response_model=OrderCreatedResponse, status_code=201)
def create_order(
    request: Request,
    body: CreateOrderRequest,
    current: CurrentUser = Depends(get_current_user),
) -> OrderCreatedResponse:
    """Place an order. The order is confirmed immediately on success."""
    order_service: OrderService = request.app.state.order_service
    try:
        receipt = order_service.create_order(current.user_id, body.item_id, body.quantity)
    except (InvalidItem, InvalidQuantityError, InsufficientPermissions, UserNotFound) as exc:
        raise HTTPException(status_code=400, detail={"code": exc.code, "message": exc.message}) from exc
    return OrderCreatedResponse.from_receipt(receipt)


@router.get("", response_model=list[OrderResponse])
def list_orders(
    request: Request,
    current: CurrentUser = Depends(get_current_user),
) -> list[OrderResponse]:
    """Return the caller's orders, oldest first."""
    order_service: OrderService = request.app.state.order_service
    return [OrderResponse.from_order(o) for o in order_service.get_user_orders(current.user_id)]


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    request: Request,
    order_id: uuid.UUID,
    current: CurrentUser = Depends(get_current_user),
) -> OrderResponse:
    """Return one order with its owner."""
    order_service: OrderService = request.app.state.order_service
    try:
        order = order_service.get_order(order_id, current.user_id)
    except (OrderNotFound, UserNotFound, AccessDenied) as exc:
        raise HTTPException(status_code=404, detail={"code": exc.code, "message": exc.message}) from exc
    return OrderResponse.from_order(order)
