"""Order models for cart checkouts."""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bistro.db.base import Base


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class DeliveryMode(str, Enum):
    DELIVERY = "delivery"
    PICKUP = "pickup"


class PaymentMode(str, Enum):
    """Payment mode is recorded only; no payment is processed."""

    CARD = "card"
    CASH = "cash"
    TICKETS = "tickets"


class Order(Base):
    """Checked-out customer order with frozen totals."""

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    no: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=OrderStatus.PENDING.value)
    delivery_mode: Mapped[str] = mapped_column(String(16), nullable=False, default=DeliveryMode.DELIVERY.value)
    delivery_address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    delivery_zip: Mapped[str | None] = mapped_column(String(20), nullable=True)
    delivery_instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    payment_mode: Mapped[str] = mapped_column(String(16), nullable=False, default=PaymentMode.CARD.value)
    client_first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    client_last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    client_phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    client_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    tax_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    delivery_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    status_updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    __table_args__ = (Index("uq_orders_no", "no", unique=True),)

    @property
    def client_name(self) -> str:
        return " ".join(part for part in (self.client_first_name, self.client_last_name) if part)


class OrderItem(Base):
    """Snapshot of order line item."""

    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    order: Mapped[Order] = relationship(back_populates="items")
