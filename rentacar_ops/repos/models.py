from __future__ import annotations

"""SQLAlchemy ORM models for rental operations persistence.

These ORM models define the SQL schema used by the SQL repository
implementation in ``rentacar_ops.repos.sql``.

Design
------

- Reservations carry their lifecycle status and approval status side by
  side; the reservation code is unique.
- Vehicles carry the status and odometer mileage that departures and returns
  update.
- Payments are numbered uniquely and optionally point at the reservation
  whose settlement created them.
- Master data tables (companies, customers, daily report dealers) are fed by
  the spreadsheet import and keyed by a unique business code so that re-imports
  skip rows already present.
- Import histories keep the outcome of each import run.

Table names are prefixed with ``rc_`` to avoid collisions in shared databases.
Scheduled pickup/return times are stored as naive datetimes.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class ReservationRow(Base):
    """Row model for ``rc_reservations``."""

    __tablename__ = "rc_reservations"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    reservation_code: Mapped[str] = mapped_column(String(16), unique=True, index=True)

    vehicle_class_id: Mapped[str] = mapped_column(String(64), index=True)
    vehicle_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)

    customer_name: Mapped[str] = mapped_column(String(255))
    customer_name_kana: Mapped[str] = mapped_column(String(255))
    customer_phone: Mapped[str] = mapped_column(String(64))
    customer_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    customer_code: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    entity_type: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    company_code: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    channel: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    account_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    pickup_date: Mapped[datetime] = mapped_column(DateTime, index=True)
    return_date: Mapped[datetime] = mapped_column(DateTime, index=True)
    pickup_office_id: Mapped[str] = mapped_column(String(64))
    return_office_id: Mapped[str] = mapped_column(String(64))

    estimated_amount: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    actual_amount: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(String(16), index=True)

    approval_status: Mapped[str] = mapped_column(String(16), index=True)
    approved_by_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    approval_comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    actual_pickup_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    departure_odometer: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    actual_return_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    return_odometer: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    fuel_level_at_return: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    settled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    revenue_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class VehicleRow(Base):
    """Row model for ``rc_vehicles``."""

    __tablename__ = "rc_vehicles"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    vehicle_class_id: Mapped[str] = mapped_column(String(64), index=True)
    plate_number: Mapped[str] = mapped_column(String(32), unique=True)
    office_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    status: Mapped[str] = mapped_column(String(16))
    mileage: Mapped[int] = mapped_column(Integer, default=0)


class PaymentRow(Base):
    """Row model for ``rc_payments``."""

    __tablename__ = "rc_payments"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    payment_number: Mapped[str] = mapped_column(String(16), unique=True, index=True)
    payment_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    amount: Mapped[int] = mapped_column(Integer)
    payment_category: Mapped[str] = mapped_column(String(32))
    payer_name: Mapped[str] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(32))
    reservation_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)


class CompanyRow(Base):
    """Row model for ``rc_companies`` (customer companies)."""

    __tablename__ = "rc_companies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    customer_company_code: Mapped[str] = mapped_column(String(32), unique=True)
    company_name_kana: Mapped[str] = mapped_column(String(255), default="")
    official_name: Mapped[str] = mapped_column(String(255), default="")
    short_name: Mapped[str] = mapped_column(String(255), default="")
    channel_code: Mapped[str] = mapped_column(String(32), default="")


class CustomerRow(Base):
    """Row model for ``rc_customers`` (departments / contacts of customer companies)."""

    __tablename__ = "rc_customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    area: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    dealer: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    channel_code: Mapped[str] = mapped_column(String(32), default="")
    department_code: Mapped[str] = mapped_column(String(32), default="")
    company_code: Mapped[str] = mapped_column(String(32), default="")
    customer_company_code: Mapped[str] = mapped_column(String(32), default="")
    department_customer_code: Mapped[str] = mapped_column(String(64), unique=True)
    department_customer_name_kana: Mapped[str] = mapped_column(String(255), default="")
    department_customer_name: Mapped[str] = mapped_column(String(255), default="")
    short_name: Mapped[str] = mapped_column(String(255), default="")


class DailyReportDealerRow(Base):
    """Row model for ``rc_daily_report_dealers``."""

    __tablename__ = "rc_daily_report_dealers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_code: Mapped[str] = mapped_column(String(32), unique=True)
    company_name: Mapped[str] = mapped_column(String(255), default="")


class ImportHistoryRow(Base):
    """Row model for ``rc_import_histories``.

    ``error_log`` keeps the first row errors of the run as a JSON list.
    """

    __tablename__ = "rc_import_histories"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    target: Mapped[str] = mapped_column(String(32))
    file_name: Mapped[str] = mapped_column(String(255))
    sheet_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    record_count: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[str] = mapped_column(String(16))
    error_log: Mapped[Optional[List[Dict[str, Any]]]] = mapped_column(JSON, nullable=True)
    imported_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
