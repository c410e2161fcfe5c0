"""Money arithmetic for carts and orders.

Pure functions only. Amounts are ``Decimal`` rounded half-up to the currency
minor unit; ``int``/``float``/``str`` inputs are converted through ``str`` so
binary float artifacts never leak into totals.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PricingRules:
    tax_percent: Decimal = Decimal("18")
    free_delivery_threshold: Decimal = Decimal("500")
    flat_delivery_fee: Decimal = Decimal("40")

    @classmethod
    def from_config(cls, config) -> "PricingRules":
        return cls(
            tax_percent=Decimal(str(config.tax_percent)),
            free_delivery_threshold=Decimal(str(config.free_delivery_threshold)),
            flat_delivery_fee=Decimal(str(config.flat_delivery_fee)),
        )


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    delivery_fee: Decimal
    tax: Decimal
    discount: Decimal
    total_amount: Decimal


def item_subtotal(quantity: int, unit_price) -> Decimal:
    return to_money(Decimal(int(quantity)) * Decimal(str(unit_price)))


def cart_total(items: Iterable) -> Decimal:
    # trusts stored subtotals; callers keep them fresh
    return to_money(sum((Decimal(str(it.subtotal)) for it in items), Decimal("0")))


def delivery_fee(order_subtotal, rules: PricingRules = PricingRules()) -> Decimal:
    if to_money(order_subtotal) >= rules.free_delivery_threshold:
        return Decimal("0.00")
    return to_money(rules.flat_delivery_fee)


def order_totals(items: Iterable, *, delivery_fee=0, tax_percent=0, discount=0) -> OrderTotals:
    """Compute order money fields; each one is rounded on its own."""
    subtotal = sum((Decimal(str(it.subtotal)) for it in items), Decimal("0"))
    fee = Decimal(str(delivery_fee))
    disc = Decimal(str(discount))
    tax = subtotal * Decimal(str(tax_percent)) / Decimal("100")
    total = subtotal + fee + tax - disc
    return OrderTotals(
        subtotal=to_money(subtotal),
        delivery_fee=to_money(fee),
        tax=to_money(tax),
        discount=to_money(disc),
        total_amount=to_money(total),
    )
