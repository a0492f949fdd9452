"""Dentist working windows and unavailability ORM models."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    SmallInteger,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from bastadental.models.base import Base, utc_now


class DentistAvailability(Base):
    """An explicit open window for a dentist on one date."""

    __tablename__ = "dentist_availability"
    __table_args__ = (
        UniqueConstraint("dentist_id", "date", name="uq_dentist_availability_day"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    dentist_id: Mapped[int] = mapped_column(
        ForeignKey("dentists.id", ondelete="CASCADE"),
        nullable=False,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time_start: Mapped[str] = mapped_column(String(5), nullable=False)
    time_end: Mapped[str] = mapped_column(String(5), nullable=False)


class DentistPermanentUnavailability(Base):
    """A weekday the dentist never works (0 = Sunday)."""

    __tablename__ = "dentist_permanent_unavailability"
    __table_args__ = (
        UniqueConstraint(
            "dentist_id",
            "day_of_week",
            name="uq_dentist_permanent_day",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    dentist_id: Mapped[int] = mapped_column(
        ForeignKey("dentists.id", ondelete="CASCADE"),
        nullable=False,
    )
    day_of_week: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )


class DentistTemporaryUnavailability(Base):
    """A date range closure for one dentist; open-ended when end_date is null."""

    __tablename__ = "dentist_temporary_unavailability"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    dentist_id: Mapped[int] = mapped_column(
        ForeignKey("dentists.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    start_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[Optional[dt.date]] = mapped_column(Date, nullable=True)
    reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
