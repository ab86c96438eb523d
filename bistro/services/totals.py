"""Subtotal, tax and total computation for orders.

All money is handled as ``Decimal`` quantized to cents with ROUND_HALF_UP.
Each line is rounded before it is summed, and tax is computed once on the
rounded subtotal, so ``total == subtotal + tax_amount + delivery_fee`` holds
to the cent. Inputs are expected to be validated (non-negative) already.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from bistro.models.order import Order

TAX_RATE: Decimal = Decimal("0.10")
CENT: Decimal = Decimal("0.01")


class PricedLine(Protocol):
    unit_price: Decimal
    quantity: int


@dataclass(frozen=True)
class Line:
    unit_price: Decimal
    quantity: int


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    tax_amount: Decimal
    delivery_fee: Decimal
    total: Decimal


def to_money(value: Decimal | int | str) -> Decimal:
    """Quantize a value to cents; floats are rejected to keep arithmetic exact."""
    if isinstance(value, float):
        raise TypeError("Money values must not be floats")
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(unit_price: Decimal, quantity: int) -> Decimal:
    return to_money(Decimal(unit_price) * quantity)


def compute_totals(items: Iterable[PricedLine], delivery_fee: Decimal | str = Decimal("0.00")) -> Totals:
    subtotal: Decimal = sum((line_total(item.unit_price, item.quantity) for item in items), Decimal("0.00"))
    subtotal = to_money(subtotal)
    tax_amount: Decimal = to_money(subtotal * TAX_RATE)
    fee: Decimal = to_money(delivery_fee)
    return Totals(
        subtotal=subtotal,
        tax_amount=tax_amount,
        delivery_fee=fee,
        total=subtotal + tax_amount + fee,
    )


def apply_order_totals(order: Order) -> Totals:
    """Recompute line totals and order totals in place after items changed."""
    for item in order.items:
        item.total = line_total(item.unit_price, item.quantity)
    totals: Totals = compute_totals(order.items, order.delivery_fee or Decimal("0.00"))
    order.subtotal = totals.subtotal
    order.tax_amount = totals.tax_amount
    order.delivery_fee = totals.delivery_fee
    order.total = totals.total
    return totals
