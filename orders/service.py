"""
orders/service.py -- Order creation and retrieval use cases.

OrderService composes the order workflow with a UserRepository and an
OrderRepository. Each use case does at most one store call per entity, and
each store call is atomic on its own; there is no cross-store transaction.
A crash between the user lookup and the order save leaves nothing behind.

Access rule for single-order reads: the owner, or anyone ranked Analyst or
above.
"""

from __future__ import annotations

import logging
import uuid

from auth.credentials import has_permission
from auth.roles import Role
from auth.store import UserRepository
from core.errors import AccessDenied, InsufficientPermissions, InvalidItem, OrderNotFound, UserNotFound
from orders.models import CATALOG, Order, OrderReceipt
from orders.store import OrderRepository
from orders.workflow import OrderWorkflow

logger = logging.getLogger("threatintel.orders")


class OrderService:
    def __init__(self, orders: OrderRepository, users: UserRepository) -> None:
        self._orders = orders
        self._users = users

    def create_order(self, user_id: uuid.UUID, item_id: str, quantity: int) -> OrderReceipt:
        """Place and confirm an order for a catalog item.

        The item check runs first, so an unknown item fails the same way
        whatever the state of the user.
        """
        if item_id not in CATALOG:
            raise InvalidItem(f"Invalid item_id: {item_id!r}.")

        user = self._users.find_by_id(user_id)
        if user is None:
            raise UserNotFound()

        if not has_permission(user, Role.viewer):
            raise InsufficientPermissions()

        workflow = OrderWorkflow.create(user.id, item_id, quantity)
        workflow.confirm()
        self._orders.save(workflow.order)

        logger.info("Order %s created for user %s (%s x%d)", workflow.order.id, user.id, item_id, quantity)
        return OrderReceipt(order_id=workflow.order.id, status=workflow.status)

    def get_order(self, order_id: uuid.UUID, requesting_user_id: uuid.UUID) -> Order:
        """Return one order with its owner attached, if the requester may see it."""
        order = self._orders.find_by_id(order_id)
        if order is None:
            raise OrderNotFound()

        requester = self._users.find_by_id(requesting_user_id)
        if requester is None:
            raise UserNotFound()

        if order.user_id != requester.id and not has_permission(requester, Role.analyst):
            logger.warning("User %s denied access to order %s", requester.id, order.id)
            raise AccessDenied()

        order.user = requester if order.user_id == requester.id else self._users.find_by_id(order.user_id)
        return order

    def get_user_orders(self, user_id: uuid.UUID) -> list[Order]:
        """Return every order owned by user_id in storage order."""
        return self._orders.find_by_user_id(user_id)

    def status_report(self) -> dict[str, int]:
        """Order counts per status across all users. Analyst reporting view."""
        return self._orders.count_by_status()
