"""Order totals computation tests."""

from decimal import Decimal

import pytest

from bistro.models.order import Order, OrderItem
from bistro.services.totals import Line, apply_order_totals, compute_totals, line_total, to_money


def test_compute_totals_for_delivery_order() -> None:
    totals = compute_totals(
        [Line(unit_price=Decimal("12.50"), quantity=2), Line(unit_price=Decimal("7.00"), quantity=1)],
        Decimal("5.00"),
    )

    assert totals.subtotal == Decimal("32.00")
    assert totals.tax_amount == Decimal("3.20")
    assert totals.delivery_fee == Decimal("5.00")
    assert totals.total == Decimal("40.20")


def test_lines_are_rounded_before_tax() -> None:
    totals = compute_totals([Line(unit_price=Decimal("3.33"), quantity=3)])

    assert totals.subtotal == Decimal("9.99")
    assert totals.tax_amount == Decimal("1.00")
    assert totals.total == Decimal("10.99")


def test_half_cent_rounds_up() -> None:
    assert to_money(Decimal("0.005")) == Decimal("0.01")
    assert line_total(Decimal("0.125"), 1) == Decimal("0.13")


def test_empty_line_list_yields_zero_totals() -> None:
    totals = compute_totals([], Decimal("0"))

    assert totals.subtotal == Decimal("0.00")
    assert totals.tax_amount == Decimal("0.00")
    assert totals.total == Decimal("0.00")


@pytest.mark.parametrize(
    ("price", "quantity", "fee"),
    [("0.01", 1, "0.00"), ("19.99", 7, "5.00"), ("4.45", 3, "2.35"), ("1234.56", 2, "0.00")],
)
def test_total_always_adds_up_to_the_cent(price: str, quantity: int, fee: str) -> None:
    totals = compute_totals([Line(unit_price=Decimal(price), quantity=quantity)], Decimal(fee))

    assert totals.total == totals.subtotal + totals.tax_amount + totals.delivery_fee
    for amount in (totals.subtotal, totals.tax_amount, totals.delivery_fee, totals.total):
        assert amount == amount.quantize(Decimal("0.01"))
        assert amount >= 0


def test_float_money_is_rejected() -> None:
    with pytest.raises(TypeError):
        to_money(1.1)


def test_apply_order_totals_recomputes_lines_and_order() -> None:
    order = Order(delivery_fee=Decimal("5.00"))
    order.items.append(
        OrderItem(product_name="Soup", unit_price=Decimal("3.33"), quantity=3, total=Decimal("0.00"))
    )
    order.items.append(
        OrderItem(product_name="Bread", unit_price=Decimal("2.00"), quantity=1, total=Decimal("0.00"))
    )

    apply_order_totals(order)

    assert [item.total for item in order.items] == [Decimal("9.99"), Decimal("2.00")]
    assert order.subtotal == Decimal("11.99")
    assert order.tax_amount == Decimal("1.20")
    assert order.total == Decimal("18.19")
