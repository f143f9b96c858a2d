"""Payment model - one row per checkout attempt."""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, DateTime, Numeric, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from storefront.database import Base
from storefront.fsm.states import PaymentStatus


class Payment(Base):
    """
    Payment record for a course purchase.
    transaction_id is unique and is the key gateway callbacks are matched on.
    """

    __tablename__ = "payments"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # Owner profile (profiles.id, not the auth user id)
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        nullable=True,
        index=True,
    )

    course_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        nullable=True,
        index=True,
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
    )

    currency: Mapped[Optional[str]] = mapped_column(
        String(3),
        default="BDT",
        nullable=True,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        default=PaymentStatus.PENDING.value,
        nullable=False,
    )

    # bkash / sslcommerz / free
    payment_method: Mapped[Optional[str]] = mapped_column(
        String(30),
        nullable=True,
    )

    # Locally generated invoice id, sent to the gateway before redirect
    transaction_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        unique=True,
        nullable=True,
    )

    # Gateway session reference (bKash paymentID, SSLCommerz sessionkey)
    gateway_session_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        index=True,
    )

    # Gateway's final transaction id (bKash trxID, SSLCommerz bank_tran_id)
    gateway_transaction_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    payment_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Payment {self.transaction_id} status={self.status}>"

    @property
    def is_terminal(self) -> bool:
        return PaymentStatus(self.status).is_terminal
