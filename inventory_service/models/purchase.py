from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum as PyEnum

from sqlalchemy import DateTime, Enum, Integer, Numeric, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from inventory_service.database import Base

CENTS = Decimal("0.01")

PURCHASE_COMPLETED_NOTE = "Purchase processed successfully"
PURCHASE_CANCELLED_NOTE = "Purchase cancelled"


class PurchaseStatus(str, PyEnum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    RETURNED = "returned"  # reserved, no operation transitions into it


def compute_total(unit_price: Decimal, quantity: int) -> Decimal:
    return (Decimal(unit_price) * quantity).quantize(CENTS, rounding=ROUND_HALF_UP)


class PurchaseRecord(Base):
    """Purchase history entry. Only ``status`` and ``notes`` change after insert."""

    __tablename__ = "purchases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[PurchaseStatus] = mapped_column(
        Enum(PurchaseStatus, values_callable=lambda x: [e.value for e in x]),
        default=PurchaseStatus.COMPLETED,
        index=True,
    )
    notes: Mapped[str] = mapped_column(Text, default="")
    purchased_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), index=True)
