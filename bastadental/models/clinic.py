"""Clinic-wide closure ORM models."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from sqlalchemy import Date, DateTime, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from bastadental.models.base import Base, utc_now


class ClinicPermanentUnavailability(Base):
    """A weekday the whole clinic is closed (0 = Sunday)."""

    __tablename__ = "clinic_permanent_unavailability"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    day_of_week: Mapped[int] = mapped_column(
        SmallInteger,
        nullable=False,
        unique=True,
    )
    reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )


class ClinicTemporaryUnavailability(Base):
    """A date range the whole clinic is closed."""

    __tablename__ = "clinic_temporary_unavailability"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    start_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[Optional[dt.date]] = mapped_column(Date, nullable=True)
    reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
