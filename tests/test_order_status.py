"""Tests for the order status transition table."""

import itertools

import pytest

from pantryfresh.services.order_status import (
    CANCELLABLE_STATUSES,
    TERMINAL_STATUSES,
    TRANSITIONS,
    OrderStatus,
    can_transition,
    releases_stock,
    status_info,
)

S = OrderStatus

ALLOWED = {
    (S.PENDING, S.CONFIRMED),
    (S.PENDING, S.CANCELLED),
    (S.CONFIRMED, S.PROCESSING),
    (S.CONFIRMED, S.CANCELLED),
    (S.PROCESSING, S.SHIPPED),
    (S.PROCESSING, S.CANCELLED),
    (S.SHIPPED, S.DELIVERED),
    (S.SHIPPED, S.RETURNED),
    (S.DELIVERED, S.RETURNED),
}


def test_table_covers_every_status():
    assert set(TRANSITIONS) == set(OrderStatus)


@pytest.mark.parametrize("current,target", list(itertools.product(OrderStatus, OrderStatus)))
def test_can_transition_is_exactly_the_table(current, target):
    assert can_transition(current, target) is ((current, target) in ALLOWED)


@pytest.mark.parametrize(
    "current,target,expected",
    [
        (S.PENDING, S.SHIPPED, False),
        (S.SHIPPED, S.DELIVERED, True),
        (S.DELIVERED, S.CONFIRMED, False),
        (S.SHIPPED, S.CANCELLED, False),
        (S.PENDING, S.PENDING, False),
    ],
)
def test_named_transitions(current, target, expected):
    assert can_transition(current, target) is expected


def test_accepts_plain_strings():
    assert can_transition("PENDING", "CONFIRMED")


def test_terminal_statuses():
    assert TERMINAL_STATUSES == {S.CANCELLED, S.RETURNED}


def test_cancellable_statuses_are_pre_shipment():
    assert CANCELLABLE_STATUSES == {S.PENDING, S.CONFIRMED, S.PROCESSING}


def test_only_pre_shipment_cancellation_releases_stock():
    assert releases_stock(S.PROCESSING, S.CANCELLED)
    assert not releases_stock(S.SHIPPED, S.RETURNED)
    assert not releases_stock(S.PENDING, S.CONFIRMED)


def test_status_info():
    info = status_info(S.SHIPPED)

    assert info["label"] == "Shipped"
    assert info["can_cancel"] is False
    assert info["next_statuses"] == ["DELIVERED", "RETURNED"]
    assert status_info("PENDING")["can_cancel"] is True
