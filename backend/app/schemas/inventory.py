"""Pydantic schemas for site inventory, movements and thresholds."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class SiteInventoryOut(BaseModel):
    id: str
    site_id: str
    packaging_type_id: str
    quantity: int
    quantity_damaged: int
    handling_count: int
    total_dispatched: int
    total_received: int
    total_returned: int
    last_counted_at: datetime | None = None
    updated_at: datetime

    # Filled from the threshold row
    min_threshold: int | None = None
    stock_status: str = "ok"  # ok | warning | critical

    model_config = {"from_attributes": True}


class PackagingMovementOut(BaseModel):
    id: str
    movement_type: str
    site_id: str
    packaging_type_id: str
    load_id: str | None = None
    quantity: int
    quantity_damaged: int
    direction: str
    reference_number: str | None = None
    notes: str | None = None
    recorded_by: str | None = None
    recorded_at: datetime

    model_config = {"from_attributes": True}


class ManualMovementRequest(BaseModel):
    """Manual ledger entry; quantities are signed (negative = out)."""
    site_id: str
    packaging_type_id: str
    movement_type: Literal[
        "adjustment", "purchase", "disposal", "damage", "repair", "loss", "transfer",
    ]
    quantity: int = 0
    quantity_damaged: int = 0
    reference_number: str | None = None
    notes: str | None = None


class ThresholdIn(BaseModel):
    site_id: str
    packaging_type_id: str
    min_threshold: int = Field(..., ge=0)
    max_threshold: int | None = Field(None, ge=0)
    alert_enabled: bool = True


class ThresholdOut(BaseModel):
    id: str
    site_id: str
    packaging_type_id: str
    min_threshold: int
    max_threshold: int | None = None
    alert_enabled: bool

    model_config = {"from_attributes": True}


class PackagingBalanceOut(BaseModel):
    packaging_type_id: str
    on_hand: int
    in_transit: int
    total: int
