"""Order domain logic: checkout, idempotent replay and status changes."""

from __future__ import annotations

import json
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bistro.core.config import settings
from bistro.core.errors import DomainError, EmptyCart, NotFound, ValidationFailed
from bistro.models.order import DeliveryMode, Order, OrderItem, OrderStatus
from bistro.schemas.order import OrderCreate, OrderEnvelope, OrderResponse
from bistro.services import idempotency, notifications, order_status
from bistro.services.totals import Line, Totals, apply_order_totals, compute_totals, line_total, to_money
from bistro.utils.time import utc_now

logger = logging.getLogger(__name__)

ORDER_NO_ATTEMPTS: int = 5
ORDER_CREATED_MESSAGE: str = "Order created."
DEFAULT_ORDER_CONFIRMATION: str = "Your order is confirmed and will be prepared shortly."


@dataclass
class OrderOutcome:
    """Serialized checkout response plus the order when it was created now."""

    status_code: int
    body: str
    order: Order | None = None
    replayed: bool = False


def generate_order_no(now: datetime) -> str:
    """Return ``<prefix><YYYYMMDD>-<4 digits>``; uniqueness is enforced by the DB index."""
    suffix: int = 1000 + secrets.randbelow(9000)
    return f"{settings.order_no_prefix}{now.strftime('%Y%m%d')}-{suffix}"


def resolve_delivery_fee(payload: OrderCreate) -> Decimal:
    if payload.delivery_mode == DeliveryMode.PICKUP:
        return Decimal("0.00")
    if payload.delivery_fee is not None:
        return to_money(payload.delivery_fee)
    return to_money(settings.default_delivery_fee)


def validate_order_payload(payload: OrderCreate) -> None:
    if not payload.items:
        raise EmptyCart()

    errors: list[dict[str, str]] = []
    for index, item in enumerate(payload.items):
        if item.quantity < 1:
            errors.append({"field": f"items.{index}.quantity", "message": "Quantity must be at least 1."})
        if item.price < 0:
            errors.append({"field": f"items.{index}.price", "message": "Price must not be negative."})
    if payload.delivery_mode == DeliveryMode.DELIVERY and not (payload.delivery_address or "").strip():
        errors.append({"field": "delivery_address", "message": "Delivery address is required for delivery orders."})
    if errors:
        raise ValidationFailed(errors[0]["message"], errors=errors)


def _build_order(payload: OrderCreate, totals: Totals, now: datetime) -> Order:
    is_delivery: bool = payload.delivery_mode == DeliveryMode.DELIVERY
    order = Order(
        no=generate_order_no(now),
        status=OrderStatus.PENDING.value,
        delivery_mode=payload.delivery_mode.value,
        delivery_address=payload.delivery_address if is_delivery else None,
        delivery_zip=payload.delivery_zip if is_delivery else None,
        delivery_instructions=payload.delivery_instructions if is_delivery else None,
        payment_mode=payload.payment_mode.value,
        client_first_name=payload.client_first_name,
        client_last_name=payload.client_last_name,
        client_phone=payload.client_phone,
        client_email=str(payload.client_email) if payload.client_email else None,
        subtotal=totals.subtotal,
        tax_amount=totals.tax_amount,
        delivery_fee=totals.delivery_fee,
        total=totals.total,
        created_at=now,
    )
    for item in payload.items:
        order.items.append(
            OrderItem(
                product_id=item.item_id,
                product_name=item.name,
                unit_price=to_money(item.price),
                quantity=item.quantity,
                total=line_total(item.price, item.quantity),
            )
        )
    return order


def _is_order_no_collision(exc: IntegrityError) -> bool:
    text: str = str(exc.orig)
    return "uq_orders_no" in text or "orders.no" in text


def place_order(db: Session, payload: OrderCreate, now: datetime | None = None) -> Order:
    """Validate, price and persist an order with its items in one transaction."""
    validate_order_payload(payload)
    now = now or utc_now()

    lines: list[Line] = [Line(unit_price=item.price, quantity=item.quantity) for item in payload.items]
    totals: Totals = compute_totals(lines, resolve_delivery_fee(payload))

    attempt: int = 0
    while True:
        attempt += 1
        order: Order = _build_order(payload, totals, now)
        db.add(order)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            if not _is_order_no_collision(exc) or attempt >= ORDER_NO_ATTEMPTS:
                raise
            logger.warning("[ORDER] Order number %s collided; retrying (%s/%s)", order.no, attempt, ORDER_NO_ATTEMPTS)
            continue
        break

    db.refresh(order)
    logger.info("[ORDER] Created %s total=%s items=%s", order.no, order.total, len(order.items))
    return order


def render_order(order: Order, message: str | None = ORDER_CREATED_MESSAGE) -> str:
    return OrderEnvelope(message=message, order=OrderResponse.model_validate(order)).model_dump_json()


def render_error(exc: DomainError) -> str:
    return json.dumps(exc.to_payload(), separators=(",", ":"))


def create_order(db: Session, payload: OrderCreate, idempotency_key: str | None = None) -> OrderOutcome:
    """Checkout entry point; a repeated Idempotency-Key replays the first response."""
    if not idempotency_key:
        order: Order = place_order(db, payload)
        return OrderOutcome(status_code=201, body=render_order(order), order=order)

    request_fingerprint: str = idempotency.fingerprint(payload.model_dump(mode="json"))
    stored = idempotency.claim(db, idempotency_key, request_fingerprint)
    if stored is not None:
        return OrderOutcome(status_code=stored.status_code, body=stored.body, replayed=True)

    try:
        order = place_order(db, payload)
    except DomainError as exc:
        body: str = render_error(exc)
        idempotency.fulfill(db, idempotency_key, exc.status_code, body)
        return OrderOutcome(status_code=exc.status_code, body=body)
    except Exception:
        db.rollback()
        idempotency.release(db, idempotency_key)
        raise

    body = render_order(order)
    idempotency.fulfill(db, idempotency_key, 201, body)
    return OrderOutcome(status_code=201, body=body, order=order)


def get_order(db: Session, order_id: int, *, lock: bool = False) -> Order:
    """Load an order; ``lock`` re-reads the row with FOR UPDATE over any cached copy."""
    query = select(Order).where(Order.id == order_id)
    if lock:
        query = query.with_for_update().execution_options(populate_existing=True)
    order: Order | None = db.scalar(query)
    if order is None:
        raise NotFound("Order not found.")
    return order


def change_order_status(
    db: Session,
    order_id: int,
    target: OrderStatus | str,
    confirmation_message: str | None = None,
) -> tuple[Order, notifications.Notification | None]:
    """Apply a validated transition and return the notification to send after commit."""
    order: Order = get_order(db, order_id, lock=True)
    previous: str = order.status
    try:
        new_status: OrderStatus = order_status.transition_to(order, target)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(order)
    logger.info("[ORDER] %s status %s -> %s", order.no, previous, new_status.value)

    if new_status == OrderStatus.CONFIRMED:
        return order, notifications.order_confirmed(order, confirmation_message or DEFAULT_ORDER_CONFIRMATION)
    return order, None


def advance_order_status(db: Session, order_id: int) -> tuple[Order, notifications.Notification | None]:
    order: Order = get_order(db, order_id, lock=True)
    previous: str = order.status
    new_status: OrderStatus = order_status.advance(order)
    db.commit()
    db.refresh(order)
    logger.info("[ORDER] %s status cycled %s -> %s", order.no, previous, new_status.value)

    if new_status == OrderStatus.CONFIRMED:
        return order, notifications.order_confirmed(order, DEFAULT_ORDER_CONFIRMATION)
    return order, None


def recalculate_order_totals(db: Session, order_id: int) -> Order:
    """Refresh stored totals after line items were edited."""
    order: Order = get_order(db, order_id, lock=True)
    apply_order_totals(order)
    db.commit()
    db.refresh(order)
    return order
