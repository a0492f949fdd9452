"""Appointment model definition."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bastadental.models.base import Base, utc_now

if TYPE_CHECKING:
    from bastadental.models.dentist import Dentist
    from bastadental.models.user import User

STATUS_PENDING = "pending"
STATUS_CONFIRMED = "confirmed"
STATUS_CANCELLED = "cancelled"
STATUS_COMPLETED = "completed"
APPOINTMENT_STATUSES = (
    STATUS_PENDING,
    STATUS_CONFIRMED,
    STATUS_CANCELLED,
    STATUS_COMPLETED,
)
TERMINAL_STATUSES = frozenset({STATUS_CANCELLED, STATUS_COMPLETED})

TRANSFER_PENDING = "pending"
TRANSFER_AVAILABLE = "available"
TRANSFER_ACCEPTED = "accepted"
TRANSFER_COMPLETED = "completed"
TRANSFER_STATUSES = (
    TRANSFER_PENDING,
    TRANSFER_AVAILABLE,
    TRANSFER_ACCEPTED,
    TRANSFER_COMPLETED,
)

DOWNPAYMENT_UNPAID = "unpaid"
DOWNPAYMENT_PAID = "paid"
DOWNPAYMENT_STATUSES = (DOWNPAYMENT_UNPAID, DOWNPAYMENT_PAID)

PAYMENT_METHOD_CLINIC = "clinic"
PAYMENT_METHODS = ("card", "gcash", "bank", PAYMENT_METHOD_CLINIC)

_LIVE_SLOT = text("status <> 'cancelled'")


class Appointment(Base):
    """Represents a booked dental appointment."""

    __tablename__ = "appointments"
    __table_args__ = (
        # At most one non-cancelled appointment per dentist slot.
        Index(
            "uq_appointments_live_slot",
            "dentist_id",
            "date",
            "time",
            unique=True,
            postgresql_where=_LIVE_SLOT,
            sqlite_where=_LIVE_SLOT,
        ),
        Index("ix_appointments_date_dentist", "date", "dentist_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    service: Mapped[str] = mapped_column(String(255), nullable=False)
    dentist_id: Mapped[int] = mapped_column(
        ForeignKey("dentists.id"),
        nullable=False,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time: Mapped[str] = mapped_column(String(5), nullable=False)
    status: Mapped[str] = mapped_column(
        String(16),
        default=STATUS_PENDING,
        nullable=False,
    )
    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)
    transfer_status: Mapped[str] = mapped_column(
        String(16),
        default=TRANSFER_PENDING,
        nullable=False,
    )
    original_dentist_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("dentists.id"),
        nullable=True,
    )
    downpayment_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        default=Decimal("0.00"),
        nullable=False,
    )
    downpayment_status: Mapped[str] = mapped_column(
        String(16),
        default=DOWNPAYMENT_UNPAID,
        nullable=False,
    )
    payment_method: Mapped[Optional[str]] = mapped_column(
        String(16),
        nullable=True,
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )

    patient: Mapped["User"] = relationship(back_populates="appointments")
    dentist: Mapped["Dentist"] = relationship(foreign_keys=[dentist_id])
    original_dentist: Mapped[Optional["Dentist"]] = relationship(
        foreign_keys=[original_dentist_id],
    )
