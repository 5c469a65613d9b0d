"""Site packaging inventory & movement ledger.

SiteInventory holds the current on-hand count per (site, packaging type).
Rows are created lazily by the first movement into or out of a site and
are never deleted.  Quantities are not floored: a negative on-hand value
is a data-quality signal, corrected with a manual adjustment.

PackagingMovement is the append-only audit ledger.  Every SiteInventory
change has exactly one movement row; rows are never updated.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

LOAD_MOVEMENT_TYPES = ("dispatch", "receipt", "backload_return")
MANUAL_MOVEMENT_TYPES = (
    "adjustment", "purchase", "disposal", "damage", "repair", "loss", "transfer",
)
MOVEMENT_TYPES = LOAD_MOVEMENT_TYPES + MANUAL_MOVEMENT_TYPES


class SiteInventory(Base):
    __tablename__ = "site_packaging_inventory"
    __table_args__ = (
        UniqueConstraint("site_id", "packaging_type_id", name="uq_site_inventory_site_type"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    site_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sites.id"), nullable=False, index=True
    )
    packaging_type_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("packaging_types.id"), nullable=False
    )

    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    quantity_damaged: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Running counters
    handling_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_dispatched: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_received: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_returned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    last_counted_at: Mapped[datetime | None] = mapped_column(DateTime)
    last_counted_by: Mapped[str | None] = mapped_column(String(36))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    site = relationship("Site", lazy="selectin")
    packaging_type = relationship("PackagingType", lazy="selectin")


class PackagingMovement(Base):
    """Immutable ledger entry for a quantity change at a site."""
    __tablename__ = "packaging_movements"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    # dispatch | receipt | backload_return | adjustment | purchase |
    # disposal | damage | repair | loss | transfer
    movement_type: Mapped[str] = mapped_column(String(30), nullable=False, index=True)

    site_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sites.id"), nullable=False, index=True
    )
    packaging_type_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("packaging_types.id"), nullable=False
    )
    load_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("loads.id"), index=True
    )

    # Absolute unit count; `direction` carries the sign
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    # Signed change applied to SiteInventory.quantity_damaged
    quantity_damaged: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # in | out
    direction: Mapped[str] = mapped_column(String(10), nullable=False)

    reference_number: Mapped[str | None] = mapped_column(String(100))
    notes: Mapped[str | None] = mapped_column(Text)
    recorded_by: Mapped[str | None] = mapped_column(String(36))  # actor id
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, index=True
    )

    @property
    def signed_quantity(self) -> int:
        return self.quantity if self.direction == "in" else -self.quantity


class SitePackagingThreshold(Base):
    """Minimum stock level per (site, packaging type) for low-stock alerts."""
    __tablename__ = "site_packaging_thresholds"
    __table_args__ = (
        UniqueConstraint("site_id", "packaging_type_id", name="uq_threshold_site_type"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    site_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sites.id"), nullable=False, index=True
    )
    packaging_type_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("packaging_types.id"), nullable=False
    )
    min_threshold: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_threshold: Mapped[int | None] = mapped_column(Integer)
    alert_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
