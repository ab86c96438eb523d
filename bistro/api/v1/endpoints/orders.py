"""Order endpoints."""

from fastapi import APIRouter, BackgroundTasks, Depends, Header, Request, Response
from sqlalchemy.orm import Session

from bistro.core.config import settings
from bistro.core.errors import PayloadTooLarge
from bistro.db.session import get_db
from bistro.models.order import Order, OrderStatus
from bistro.schemas.order import (
    OrderConfirm,
    OrderCreate,
    OrderEnvelope,
    OrderResponse,
    OrderStatusUpdate,
    StatusChangeResponse,
)
from bistro.services import notifications, order_service
from bistro.services.order_service import OrderOutcome

router: APIRouter = APIRouter()

STATUS_MESSAGES: dict[str, str] = {
    OrderStatus.PENDING.value: "Order is pending.",
    OrderStatus.CONFIRMED.value: "Order confirmed.",
    OrderStatus.PREPARING.value: "Order is being prepared.",
    OrderStatus.DELIVERED.value: "Order delivered.",
    OrderStatus.CANCELLED.value: "Order cancelled.",
}


async def ensure_payload_size(request: Request) -> None:
    """Reject checkout bodies larger than the configured limit."""
    content_length: str | None = request.headers.get("content-length")
    if content_length is not None and content_length.isdigit():
        size: int = int(content_length)
    else:
        size = len(await request.body())
    if size > settings.order_max_payload_bytes:
        raise PayloadTooLarge()


def _status_response(
    order: Order,
    background_tasks: BackgroundTasks,
    notification: notifications.Notification | None,
) -> StatusChangeResponse:
    notified: bool | None = None
    if notification is not None:
        notified = notification.recipient is not None
        if notified:
            background_tasks.add_task(notifications.deliver, notification)
    return StatusChangeResponse(
        message=STATUS_MESSAGES.get(order.status, "Order updated."),
        status=order.status,
        notified=notified,
    )


@router.post("", status_code=201, dependencies=[Depends(ensure_payload_size)])
def create_order(
    payload: OrderCreate,
    background_tasks: BackgroundTasks,
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    db: Session = Depends(get_db),
) -> Response:
    """Create an order from the resolved cart lines."""
    outcome: OrderOutcome = order_service.create_order(db, payload, idempotency_key=idempotency_key)
    if outcome.order is not None:
        background_tasks.add_task(notifications.deliver, notifications.order_created(outcome.order))
    headers: dict[str, str] = {"Idempotent-Replayed": "true"} if outcome.replayed else {}
    return Response(
        content=outcome.body,
        status_code=outcome.status_code,
        media_type="application/json",
        headers=headers,
    )


@router.get("/{order_id}", response_model=OrderEnvelope)
def get_order(order_id: int, db: Session = Depends(get_db)) -> OrderEnvelope:
    order: Order = order_service.get_order(db, order_id)
    return OrderEnvelope(order=OrderResponse.model_validate(order))


@router.post("/{order_id}/status", response_model=StatusChangeResponse)
def change_status(
    order_id: int,
    payload: OrderStatusUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
) -> StatusChangeResponse:
    order, notification = order_service.change_order_status(db, order_id, payload.status)
    return _status_response(order, background_tasks, notification)


@router.post("/{order_id}/advance", response_model=StatusChangeResponse)
def advance_status(
    order_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
) -> StatusChangeResponse:
    """Cycle to the next status, as the staff status badge does."""
    order, notification = order_service.advance_order_status(db, order_id)
    return _status_response(order, background_tasks, notification)


@router.post("/{order_id}/confirm", response_model=StatusChangeResponse)
def confirm_order(
    order_id: int,
    background_tasks: BackgroundTasks,
    payload: OrderConfirm | None = None,
    db: Session = Depends(get_db),
) -> StatusChangeResponse:
    message: str | None = payload.confirmation_message if payload is not None else None
    order, notification = order_service.change_order_status(db, order_id, OrderStatus.CONFIRMED, message)
    return _status_response(order, background_tasks, notification)


@router.post("/{order_id}/prepare", response_model=StatusChangeResponse)
def prepare_order(order_id: int, background_tasks: BackgroundTasks, db: Session = Depends(get_db)) -> StatusChangeResponse:
    order, notification = order_service.change_order_status(db, order_id, OrderStatus.PREPARING)
    return _status_response(order, background_tasks, notification)


@router.post("/{order_id}/deliver", response_model=StatusChangeResponse)
def deliver_order(order_id: int, background_tasks: BackgroundTasks, db: Session = Depends(get_db)) -> StatusChangeResponse:
    order, notification = order_service.change_order_status(db, order_id, OrderStatus.DELIVERED)
    return _status_response(order, background_tasks, notification)


@router.post("/{order_id}/cancel", response_model=StatusChangeResponse)
def cancel_order(order_id: int, background_tasks: BackgroundTasks, db: Session = Depends(get_db)) -> StatusChangeResponse:
    order, notification = order_service.change_order_status(db, order_id, OrderStatus.CANCELLED)
    return _status_response(order, background_tasks, notification)
