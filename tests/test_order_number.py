"""Tests for order number generation."""

from datetime import datetime
from decimal import Decimal

import pytest

from pantryfresh.errors import ConflictError
from pantryfresh.models import Order
from pantryfresh.services.order_number import format_order_number, generate_order_number, parse_sequence
from pantryfresh.services.order_status import OrderStatus


@pytest.fixture
def insert_order(session_factory):
    def _insert(order_number):
        zero = Decimal("0")
        with session_factory() as session:
            session.add(
                Order(
                    order_number=order_number,
                    user_id=1,
                    status=OrderStatus.PENDING,
                    payment_method="COD",
                    payment_status="PENDING",
                    delivery_address={},
                    subtotal=zero,
                    delivery_fee=zero,
                    tax=zero,
                    discount=zero,
                    total_amount=zero,
                )
            )

    return _insert


def test_format():
    assert format_order_number(2024, 123) == "PF-2024-000123"
    assert parse_sequence("PF-2024-000123") == 123


def test_first_order_of_the_year(session_factory):
    with session_factory() as session:
        assert generate_order_number(session, now=datetime(2026, 1, 1)) == "PF-2026-000001"


def test_continues_from_highest_sequence(session_factory, insert_order):
    insert_order("PF-2026-000007")
    insert_order("PF-2026-000041")
    insert_order("PF-2025-000099")

    with session_factory() as session:
        assert generate_order_number(session, now=datetime(2026, 6, 1)) == "PF-2026-000042"


def test_restarts_each_year(session_factory, insert_order):
    insert_order("PF-2026-000500")

    with session_factory() as session:
        assert generate_order_number(session, now=datetime(2027, 1, 1)) == "PF-2027-000001"


def test_other_prefixes_are_ignored(session_factory, insert_order):
    insert_order("QA-2026-000900")

    with session_factory() as session:
        assert generate_order_number(session, now=datetime(2026, 1, 1)) == "PF-2026-000001"


def test_sequence_exhaustion_is_reported(session_factory, insert_order):
    insert_order("PF-2026-999999")

    with session_factory() as session:
        with pytest.raises(ConflictError, match="sequence for 2026 is exhausted"):
            generate_order_number(session, now=datetime(2026, 12, 31))
