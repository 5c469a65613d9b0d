"""Alert — a generated notification about stock or a load.

Created by the threshold evaluator (low_stock) or by load receipt
(missing_packaging).  Only acknowledgement mutates an alert; alerts are
never deleted automatically.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

SEVERITIES = ("critical", "warning", "info")


class Alert(Base):
    __tablename__ = "alerts"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    # missing_packaging | low_stock
    alert_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    # critical | warning | info
    severity: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    # ── Entity references ────────────────────────────────────
    site_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("sites.id"))
    load_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("loads.id"))
    packaging_type_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("packaging_types.id")
    )

    message: Mapped[str] = mapped_column(Text, nullable=False)

    # ── Acknowledgement ──────────────────────────────────────
    is_acknowledged: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    acknowledged_by: Mapped[str | None] = mapped_column(String(36))
    acknowledged_at: Mapped[datetime | None] = mapped_column(DateTime)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
