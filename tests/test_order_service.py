"""Unit tests for orders/service.py -- order creation and retrieval.

Covers:
- create_order() confirms a valid catalog order and persists it
- Unknown items fail with InvalidItem before the user is looked up
- create_order() for a user that no longer exists raises UserNotFound
- get_order(): owner and analyst+ may read and get the owner attached,
  another viewer is denied, unknown ids raise OrderNotFound
- get_user_orders() returns the caller's orders only, in storage order
- Store failures propagate unchanged through the service
"""

import uuid

import pytest

from auth.roles import Role
from core.errors import AccessDenied, InvalidItem, InvalidQuantityError, OrderNotFound, UserNotFound
from orders.models import Order, OrderStatus
from orders.service import OrderService
from orders.store import OrderStore


class _StoreDown(Exception):
    pass


class _FailingOrderStore:
    """OrderRepository whose writes always fail."""

    def save(self, order: Order) -> None:
        raise _StoreDown("disk full")

    def find_by_id(self, order_id):
        return None

    def find_by_user_id(self, user_id):
        return []

    def count_by_status(self):
        return {}


class TestCreateOrder:
    def test_valid_order_is_confirmed(self, order_service: OrderService, order_store: OrderStore, add_user):
        user = add_user("buyer@example.com")
        receipt = order_service.create_order(user.id, "intel-basic", 2)

        assert receipt.status is OrderStatus.confirmed
        stored = order_store.find_by_id(receipt.order_id)
        assert stored.user_id == user.id
        assert stored.item_id == "intel-basic"
        assert stored.quantity == 2
        assert stored.status is OrderStatus.confirmed

    @pytest.mark.parametrize("item_id", ["intel-basic", "intel-premium", "intel-enterprise"])
    def test_every_catalog_item(self, order_service: OrderService, add_user, item_id: str):
        user = add_user(f"{item_id}@example.com")
        assert order_service.create_order(user.id, item_id, 1).status is OrderStatus.confirmed

    def test_unknown_item(self, order_service: OrderService, add_user):
        user = add_user("bogus@example.com")
        with pytest.raises(InvalidItem):
            order_service.create_order(user.id, "bogus-item", 1)

    def test_unknown_item_checked_before_user(self, order_service: OrderService):
        with pytest.raises(InvalidItem):
            order_service.create_order(uuid.uuid4(), "bogus-item", 1)

    def test_unknown_user(self, order_service: OrderService):
        with pytest.raises(UserNotFound):
            order_service.create_order(uuid.uuid4(), "intel-basic", 1)

    def test_zero_quantity(self, order_service: OrderService, add_user):
        user = add_user("zero@example.com")
        with pytest.raises(InvalidQuantityError):
            order_service.create_order(user.id, "intel-basic", 0)

    def test_store_failure_propagates(self, user_store, add_user):
        user = add_user("down@example.com")
        service = OrderService(_FailingOrderStore(), user_store)
        with pytest.raises(_StoreDown, match="disk full"):
            service.create_order(user.id, "intel-basic", 1)


class TestGetOrder:
    def test_owner_can_read(self, order_service: OrderService, add_user):
        owner = add_user("owner@example.com")
        receipt = order_service.create_order(owner.id, "intel-premium", 1)

        order = order_service.get_order(receipt.order_id, owner.id)
        assert order.id == receipt.order_id
        assert order.user.id == owner.id
        assert order.user.email == "owner@example.com"

    def test_other_viewer_denied(self, order_service: OrderService, add_user):
        owner = add_user("owner@example.com")
        other = add_user("other@example.com")
        receipt = order_service.create_order(owner.id, "intel-basic", 1)

        with pytest.raises(AccessDenied):
            order_service.get_order(receipt.order_id, other.id)

    @pytest.mark.parametrize("role", [Role.analyst, Role.admin])
    def test_analyst_and_admin_can_read_any(self, order_service: OrderService, add_user, role: Role):
        owner = add_user("owner@example.com")
        reader = add_user("reader@example.com", role=role)
        receipt = order_service.create_order(owner.id, "intel-basic", 1)

        order = order_service.get_order(receipt.order_id, reader.id)
        assert order.user.id == owner.id

    def test_unknown_order(self, order_service: OrderService, add_user):
        user = add_user("nobody@example.com")
        with pytest.raises(OrderNotFound):
            order_service.get_order(uuid.uuid4(), user.id)

    def test_unknown_requester(self, order_service: OrderService, add_user):
        owner = add_user("owner@example.com")
        receipt = order_service.create_order(owner.id, "intel-basic", 1)
        with pytest.raises(UserNotFound):
            order_service.get_order(receipt.order_id, uuid.uuid4())


class TestListingAndReport:
    def test_get_user_orders(self, order_service: OrderService, add_user):
        alice = add_user("alice@example.com")
        bob = add_user("bob@example.com")
        first = order_service.create_order(alice.id, "intel-basic", 1)
        order_service.create_order(bob.id, "intel-basic", 1)
        second = order_service.create_order(alice.id, "intel-enterprise", 5)

        orders = order_service.get_user_orders(alice.id)
        assert [o.id for o in orders] == [first.order_id, second.order_id]

    def test_get_user_orders_empty(self, order_service: OrderService, add_user):
        user = add_user("empty@example.com")
        assert order_service.get_user_orders(user.id) == []

    def test_status_report(self, order_service: OrderService, add_user):
        user = add_user("report@example.com")
        order_service.create_order(user.id, "intel-basic", 1)
        order_service.create_order(user.id, "intel-premium", 1)

        report = order_service.status_report()
        assert report["confirmed"] == 2
        assert report["pending"] == 0
