"""Unit tests for orders/workflow.py -- the order status state machine.

Covers:
- create() starts at pending and rejects non-positive quantities
- Legal transitions move the status and refresh updated_at
- Illegal transitions raise InvalidTransitionError and leave the order as-is
- completed and cancelled are terminal
"""

import uuid
from datetime import datetime, timezone

import pytest

from core.errors import InvalidQuantityError, InvalidTransitionError
from orders.models import OrderStatus
from orders.workflow import OrderWorkflow, can_transition, is_terminal

_OLD = datetime(2020, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def workflow() -> OrderWorkflow:
    wf = OrderWorkflow.create(uuid.uuid4(), "intel-basic", 2)
    wf.order.updated_at = _OLD
    return wf


def test_create_starts_pending():
    wf = OrderWorkflow.create(uuid.uuid4(), "intel-premium", 3)
    assert wf.status is OrderStatus.pending
    assert wf.order.quantity == 3
    assert wf.order.created_at == wf.order.updated_at


@pytest.mark.parametrize("quantity", [0, -1])
def test_create_rejects_bad_quantity(quantity: int):
    with pytest.raises(InvalidQuantityError):
        OrderWorkflow.create(uuid.uuid4(), "intel-basic", quantity)


class TestLegalTransitions:
    def test_confirm(self, workflow: OrderWorkflow):
        workflow.confirm()
        assert workflow.status is OrderStatus.confirmed
        assert workflow.order.updated_at > _OLD

    def test_confirm_then_complete(self, workflow: OrderWorkflow):
        workflow.confirm()
        workflow.order.updated_at = _OLD
        workflow.complete()
        assert workflow.status is OrderStatus.completed
        assert workflow.order.updated_at > _OLD

    def test_cancel_from_pending(self, workflow: OrderWorkflow):
        workflow.cancel()
        assert workflow.status is OrderStatus.cancelled

    def test_cancel_from_confirmed(self, workflow: OrderWorkflow):
        workflow.confirm()
        workflow.cancel()
        assert workflow.status is OrderStatus.cancelled


class TestIllegalTransitions:
    def test_complete_from_pending(self, workflow: OrderWorkflow):
        with pytest.raises(InvalidTransitionError):
            workflow.complete()
        assert workflow.status is OrderStatus.pending
        assert workflow.order.updated_at == _OLD

    def test_confirm_twice(self, workflow: OrderWorkflow):
        workflow.confirm()
        with pytest.raises(InvalidTransitionError):
            workflow.confirm()

    def test_nothing_leaves_completed(self, workflow: OrderWorkflow):
        workflow.confirm()
        workflow.complete()
        for move in (workflow.confirm, workflow.complete, workflow.cancel):
            with pytest.raises(InvalidTransitionError):
                move()
        assert workflow.status is OrderStatus.completed

    def test_nothing_leaves_cancelled(self, workflow: OrderWorkflow):
        workflow.cancel()
        for move in (workflow.confirm, workflow.complete, workflow.cancel):
            with pytest.raises(InvalidTransitionError):
                move()
        assert workflow.status is OrderStatus.cancelled


def test_transition_table():
    assert can_transition(OrderStatus.pending, OrderStatus.confirmed)
    assert not can_transition(OrderStatus.pending, OrderStatus.completed)
    assert not can_transition(OrderStatus.confirmed, OrderStatus.pending)
    assert is_terminal(OrderStatus.completed)
    assert is_terminal(OrderStatus.cancelled)
    assert not is_terminal(OrderStatus.confirmed)
