"""Order API schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PlainSerializer

from bistro.models.order import DeliveryMode, OrderStatus, PaymentMode
from bistro.services.totals import to_money
from bistro.utils.time import as_utc

Money = Annotated[Decimal, PlainSerializer(lambda value: f"{to_money(value):.2f}", return_type=str)]
UtcDatetime = Annotated[datetime, PlainSerializer(lambda value: as_utc(value).isoformat(), return_type=str)]


class CartItemPayload(BaseModel):
    """Cart line resolved by the cart collaborator."""

    item_id: int | None = None
    name: str = Field(min_length=1, max_length=255)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    quantity: int = Field(default=1, ge=1)


class OrderCreate(BaseModel):
    """Checkout request for the current cart."""

    items: list[CartItemPayload] = Field(default_factory=list)
    delivery_mode: DeliveryMode = DeliveryMode.DELIVERY
    payment_mode: PaymentMode = PaymentMode.CARD
    delivery_address: str | None = Field(default=None, max_length=255)
    delivery_zip: str | None = Field(default=None, max_length=10)
    delivery_instructions: str | None = Field(default=None, max_length=500)
    delivery_fee: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    client_first_name: str = Field(min_length=2, max_length=100)
    client_last_name: str = Field(min_length=2, max_length=100)
    client_phone: str = Field(min_length=10, max_length=20)
    client_email: EmailStr | None = None


class OrderStatusUpdate(BaseModel):
    status: str


class OrderConfirm(BaseModel):
    confirmation_message: str | None = Field(default=None, max_length=2000)


class OrderItemResponse(BaseModel):
    """Serialized order item."""

    id: int
    product_id: int | None
    product_name: str
    unit_price: Money
    quantity: int
    total: Money

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    """Serialized order with frozen totals."""

    id: int
    no: str
    status: OrderStatus
    delivery_mode: DeliveryMode
    delivery_address: str | None
    delivery_zip: str | None
    delivery_instructions: str | None
    payment_mode: PaymentMode
    client_first_name: str | None
    client_last_name: str | None
    client_phone: str | None
    client_email: str | None
    subtotal: Money
    tax_amount: Money
    delivery_fee: Money
    total: Money
    created_at: UtcDatetime
    items: list[OrderItemResponse]

    model_config = ConfigDict(from_attributes=True)


class OrderEnvelope(BaseModel):
    success: bool = True
    message: str | None = None
    order: OrderResponse


class StatusChangeResponse(BaseModel):
    success: bool = True
    message: str
    status: str
    notified: bool | None = None
