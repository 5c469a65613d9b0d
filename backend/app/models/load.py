"""Load — one scheduled transport of packaging between two sites.

Lifecycle:  scheduled → loading → departed → in_transit → arrived_depot → completed
            (cancelled reachable from any non-terminal status)

`loading` is interchangeable with `scheduled` for every guard, and the
in_transit / arrived_depot steps are optional passthroughs.
"""

import uuid
from datetime import date, datetime, time

from sqlalchemy import (
    Boolean, Date, DateTime, Float, ForeignKey, Integer, String, Text, Time,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

PRE_DISPATCH_STATUSES = ("scheduled", "loading")
IN_FLIGHT_STATUSES = ("departed", "in_transit", "arrived_depot")
TERMINAL_STATUSES = ("completed", "cancelled")
NON_TERMINAL_STATUSES = PRE_DISPATCH_STATUSES + IN_FLIGHT_STATUSES
LOAD_STATUSES = NON_TERMINAL_STATUSES + TERMINAL_STATUSES


class Load(Base):
    __tablename__ = "loads"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    load_number: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False, index=True
    )

    # ── Route ────────────────────────────────────────────────
    origin_site_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sites.id"), nullable=False, index=True
    )
    destination_site_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sites.id"), nullable=False, index=True
    )
    channel_id: Mapped[str | None] = mapped_column(String(36))
    vehicle_id: Mapped[str | None] = mapped_column(String(36))
    driver_id: Mapped[str | None] = mapped_column(String(36))

    # ── Schedule ─────────────────────────────────────────────
    dispatch_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    expected_arrival_date: Mapped[date | None] = mapped_column(Date)
    scheduled_departure_time: Mapped[time | None] = mapped_column(Time)
    estimated_arrival_time: Mapped[time | None] = mapped_column(Time)
    actual_departure_time: Mapped[datetime | None] = mapped_column(DateTime)
    actual_arrival_time: Mapped[datetime | None] = mapped_column(DateTime)

    # ── Farm times (null expected → configured default) ──────
    expected_farm_arrival_time: Mapped[time | None] = mapped_column(Time)
    expected_farm_departure_time: Mapped[time | None] = mapped_column(Time)
    actual_farm_arrival_time: Mapped[datetime | None] = mapped_column(DateTime)
    actual_farm_departure_time: Mapped[datetime | None] = mapped_column(DateTime)
    farm_arrival_overtime_minutes: Mapped[int] = mapped_column(Integer, default=0)
    farm_departure_overtime_minutes: Mapped[int] = mapped_column(Integer, default=0)
    has_overtime: Mapped[bool] = mapped_column(Boolean, default=False, index=True)

    # ── Depot times ──────────────────────────────────────────
    expected_depot_arrival_time: Mapped[time | None] = mapped_column(Time)
    expected_depot_departure_time: Mapped[time | None] = mapped_column(Time)
    actual_depot_arrival_time: Mapped[datetime | None] = mapped_column(DateTime)
    actual_depot_departure_time: Mapped[datetime | None] = mapped_column(DateTime)

    # ── Status ───────────────────────────────────────────────
    # scheduled | loading | departed | in_transit | arrived_depot | completed | cancelled
    status: Mapped[str] = mapped_column(String(30), default="scheduled", index=True)
    # on_time | delayed | early (arrival, set at receipt)
    on_time_status: Mapped[str | None] = mapped_column(String(20))
    # on_time | delayed | early (departure, set at dispatch)
    departure_status: Mapped[str | None] = mapped_column(String(20))
    has_discrepancy: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    discrepancy_notes: Mapped[str | None] = mapped_column(Text)
    cancelled_reason: Mapped[str | None] = mapped_column(Text)
    notes: Mapped[str | None] = mapped_column(Text)

    # ── Backload (return trip) ───────────────────────────────
    backload_site_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("sites.id")
    )
    backload_notes: Mapped[str | None] = mapped_column(Text)
    linked_load_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("loads.id")
    )
    is_backload: Mapped[bool] = mapped_column(Boolean, default=False)

    # ── Audit ────────────────────────────────────────────────
    created_by: Mapped[str | None] = mapped_column(String(36))
    updated_by: Mapped[str | None] = mapped_column(String(36))
    confirmed_farm_arrival_by: Mapped[str | None] = mapped_column(String(36))
    confirmed_farm_arrival_at: Mapped[datetime | None] = mapped_column(DateTime)
    confirmed_farm_departure_by: Mapped[str | None] = mapped_column(String(36))
    confirmed_farm_departure_at: Mapped[datetime | None] = mapped_column(DateTime)
    confirmed_dispatch_by: Mapped[str | None] = mapped_column(String(36))
    confirmed_dispatch_at: Mapped[datetime | None] = mapped_column(DateTime)
    confirmed_receipt_by: Mapped[str | None] = mapped_column(String(36))
    confirmed_receipt_at: Mapped[datetime | None] = mapped_column(DateTime)
    cancelled_by: Mapped[str | None] = mapped_column(String(36))
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # ── Relationships ────────────────────────────────────────
    origin_site = relationship("Site", foreign_keys=[origin_site_id], lazy="selectin")
    destination_site = relationship(
        "Site", foreign_keys=[destination_site_id], lazy="selectin"
    )
    packaging = relationship(
        "LoadPackaging", back_populates="load", lazy="selectin",
        cascade="all, delete-orphan", order_by="LoadPackaging.created_at",
    )
    backload_packaging = relationship(
        "BackloadPackaging", back_populates="load", lazy="selectin",
        cascade="all, delete-orphan", order_by="BackloadPackaging.created_at",
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def origin_site_code(self) -> str | None:
        return self.origin_site.code if self.origin_site else None

    @property
    def destination_site_code(self) -> str | None:
        return self.destination_site.code if self.destination_site else None


class LoadPackaging(Base):
    """One packaging-type quantity within a load.

    quantity_received / damaged / missing are written once, at receipt.
    """
    __tablename__ = "load_packaging"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    load_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("loads.id", ondelete="CASCADE"), nullable=False, index=True
    )
    packaging_type_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("packaging_types.id"), nullable=False
    )

    quantity_dispatched: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity_received: Mapped[int | None] = mapped_column(Integer)
    quantity_damaged: Mapped[int] = mapped_column(Integer, default=0)
    quantity_missing: Mapped[int] = mapped_column(Integer, default=0)

    # Optional produce reference carried in the packaging
    product_type_id: Mapped[str | None] = mapped_column(String(36))
    product_variety_id: Mapped[str | None] = mapped_column(String(36))
    product_grade_id: Mapped[str | None] = mapped_column(String(36))
    weight_kg: Mapped[float | None] = mapped_column(Float)

    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    load = relationship("Load", back_populates="packaging")
    packaging_type = relationship("PackagingType", lazy="selectin")

    @property
    def packaging_type_code(self) -> str | None:
        return self.packaging_type.code if self.packaging_type else None

    @property
    def has_discrepancy(self) -> bool:
        if self.quantity_received is None:
            return False
        return (
            self.quantity_received != self.quantity_dispatched
            or (self.quantity_damaged or 0) > 0
            or (self.quantity_missing or 0) > 0
        )


class BackloadPackaging(Base):
    """Packaging returned to the backload site on the return trip."""
    __tablename__ = "backload_packaging"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    load_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("loads.id", ondelete="CASCADE"), nullable=False, index=True
    )
    packaging_type_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("packaging_types.id"), nullable=False
    )
    quantity_returned: Mapped[int] = mapped_column(Integer, default=0)
    quantity_damaged: Mapped[int] = mapped_column(Integer, default=0)
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    load = relationship("Load", back_populates="backload_packaging")
    packaging_type = relationship("PackagingType", lazy="selectin")
