"""Pytest fixtures for pantryfresh tests."""

import itertools
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from pantryfresh.db.session import create_session_factory, init_db
from pantryfresh.models import Product
from pantryfresh.services.cart_service import CartService
from pantryfresh.services.order_service import OrderService
from pantryfresh.services.totals import PricingRules


ADDRESS = {
    "full_name": "Asha Rao",
    "phone": "98765-43210",
    "address_line1": "12 Market Road",
    "city": "Pune",
    "state": "MH",
    "pincode": "411001",
}

_sku = itertools.count(1)


@pytest.fixture
def address():
    return dict(ADDRESS)


@pytest.fixture
def engine():
    """Shared in-memory SQLite database, fresh per test."""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        future=True,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def make_product(session_factory):
    """Insert a product and return its id."""

    def _make(price="100.00", stock=10, sale_price=None, name=None, is_available=None):
        n = next(_sku)
        with session_factory() as session:
            product = Product(
                sku=f"SKU-{n:04d}",
                name=name or f"Product {n}",
                price=Decimal(str(price)),
                sale_price=Decimal(str(sale_price)) if sale_price is not None else None,
                stock=stock,
                is_available=(stock > 0) if is_available is None else is_available,
            )
            session.add(product)
            session.flush()
            return product.id

    return _make


@pytest.fixture
def update_product(session_factory):
    def _update(product_id, **fields):
        with session_factory() as session:
            product = session.get(Product, product_id)
            for key, value in fields.items():
                setattr(product, key, value)

    return _update


@pytest.fixture
def stock_of(session_factory):
    def _stock(product_id):
        with session_factory() as session:
            return session.get(Product, product_id).stock

    return _stock


@pytest.fixture
def count_rows(session_factory):
    def _count(model):
        with session_factory() as session:
            return session.query(model).count()

    return _count


@pytest.fixture
def cart_service(session_factory):
    return CartService(session_factory)


@pytest.fixture
def pricing():
    return PricingRules(
        tax_percent=Decimal("18"),
        free_delivery_threshold=Decimal("500"),
        flat_delivery_fee=Decimal("40"),
    )


@pytest.fixture
def order_service(session_factory, pricing):
    return OrderService(session_factory, pricing=pricing)


@pytest.fixture
def place_order(cart_service, order_service):
    """Put ``lines`` ({product_id: qty}) in the user's cart and check out."""

    def _place(user_id, lines, **kwargs):
        for product_id, qty in lines.items():
            cart_service.add_item(user_id=user_id, product_id=product_id, quantity=qty)
        return order_service.create_order(user_id=user_id, delivery_address=dict(ADDRESS), **kwargs)

    return _place

