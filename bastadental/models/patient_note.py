"""Dentist notes about a patient."""

from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bastadental.models.base import Base, utc_now

if TYPE_CHECKING:
    from bastadental.models.appointment import Appointment


class PatientNote(Base):
    """Free-text notes; one row per appointment, or one general row per patient."""

    __tablename__ = "patient_notes"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    dentist_id: Mapped[int] = mapped_column(
        ForeignKey("dentists.id", ondelete="CASCADE"),
        nullable=False,
    )
    patient_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    appointment_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("appointments.id", ondelete="SET NULL"),
        nullable=True,
    )
    notes: Mapped[str] = mapped_column(Text, nullable=False)
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

    appointment: Mapped[Optional["Appointment"]] = relationship()
