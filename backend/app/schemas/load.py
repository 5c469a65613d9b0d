"""Pydantic schemas for loads and their lifecycle actions.

Quantity rules that belong to the business (dispatched > 0, origin ≠
destination) are enforced by the lifecycle service, not here, so the
same checks apply to in-process callers.
"""

from datetime import date, datetime, time
from typing import Literal

from pydantic import BaseModel, Field


# ── Line items ──────────────────────────────────────────────

class LoadPackagingIn(BaseModel):
    packaging_type_id: str
    quantity: int
    product_type_id: str | None = None
    product_variety_id: str | None = None
    product_grade_id: str | None = None
    weight_kg: float | None = None
    notes: str | None = None


class BackloadPackagingIn(BaseModel):
    packaging_type_id: str
    quantity_returned: int = Field(0, ge=0)
    quantity_damaged: int = Field(0, ge=0)
    notes: str | None = None


# ── Create / update ─────────────────────────────────────────

class LoadCreate(BaseModel):
    origin_site_id: str
    destination_site_id: str
    dispatch_date: date
    channel_id: str | None = None
    vehicle_id: str | None = None
    driver_id: str | None = None

    expected_arrival_date: date | None = None
    scheduled_departure_time: time | None = None
    estimated_arrival_time: time | None = None
    expected_farm_arrival_time: time | None = None
    expected_farm_departure_time: time | None = None
    expected_depot_arrival_time: time | None = None
    expected_depot_departure_time: time | None = None

    backload_site_id: str | None = None
    backload_notes: str | None = None
    linked_load_id: str | None = None
    is_backload: bool = False

    notes: str | None = None
    packaging: list[LoadPackagingIn]
    backload_packaging: list[BackloadPackagingIn] = []


class LoadUpdate(BaseModel):
    """Partial patch; only fields that are sent are applied."""
    origin_site_id: str | None = None
    destination_site_id: str | None = None
    channel_id: str | None = None
    vehicle_id: str | None = None
    driver_id: str | None = None
    dispatch_date: date | None = None

    expected_arrival_date: date | None = None
    scheduled_departure_time: time | None = None
    estimated_arrival_time: time | None = None
    expected_farm_arrival_time: time | None = None
    expected_farm_departure_time: time | None = None
    expected_depot_arrival_time: time | None = None
    expected_depot_departure_time: time | None = None

    backload_site_id: str | None = None
    backload_notes: str | None = None
    linked_load_id: str | None = None
    is_backload: bool | None = None

    notes: str | None = None
    # Only the pre-dispatch pair can be set directly
    status: Literal["scheduled", "loading"] | None = None
    backload_packaging: list[BackloadPackagingIn] | None = None


# ── Lifecycle actions ───────────────────────────────────────

class FarmArrivalConfirm(BaseModel):
    actual_farm_arrival_time: datetime | None = None  # defaults to now


class FarmDepartureConfirm(BaseModel):
    actual_farm_departure_time: datetime | None = None


class DispatchConfirm(BaseModel):
    actual_departure_time: datetime | None = None


class DepotEventConfirm(BaseModel):
    timestamp: datetime | None = None


class ReceiptLineIn(BaseModel):
    line_id: str
    quantity_received: int | None = Field(None, ge=0)  # None → as dispatched
    quantity_damaged: int = Field(0, ge=0)
    quantity_missing: int = Field(0, ge=0)
    notes: str | None = None


class ReceiptConfirm(BaseModel):
    actual_arrival_time: datetime | None = None
    packaging: list[ReceiptLineIn] = []  # omitted lines are fully received
    discrepancy_notes: str | None = None


class DuplicateRequest(BaseModel):
    dispatch_date: date | None = None  # defaults to the original's date


class CancelRequest(BaseModel):
    reason: str | None = None


# ── Responses ───────────────────────────────────────────────

class LoadPackagingOut(BaseModel):
    id: str
    packaging_type_id: str
    packaging_type_code: str | None = None
    quantity_dispatched: int
    quantity_received: int | None = None
    quantity_damaged: int = 0
    quantity_missing: int = 0
    product_type_id: str | None = None
    product_variety_id: str | None = None
    product_grade_id: str | None = None
    weight_kg: float | None = None
    notes: str | None = None

    model_config = {"from_attributes": True}


class BackloadPackagingOut(BaseModel):
    id: str
    packaging_type_id: str
    quantity_returned: int
    quantity_damaged: int = 0
    notes: str | None = None

    model_config = {"from_attributes": True}


class LoadOut(BaseModel):
    id: str
    load_number: str
    origin_site_id: str
    origin_site_code: str | None = None
    destination_site_id: str
    destination_site_code: str | None = None
    channel_id: str | None = None
    vehicle_id: str | None = None
    driver_id: str | None = None

    dispatch_date: date
    expected_arrival_date: date | None = None
    scheduled_departure_time: time | None = None
    estimated_arrival_time: time | None = None
    actual_departure_time: datetime | None = None
    actual_arrival_time: datetime | None = None

    expected_farm_arrival_time: time | None = None
    expected_farm_departure_time: time | None = None
    actual_farm_arrival_time: datetime | None = None
    actual_farm_departure_time: datetime | None = None
    farm_arrival_overtime_minutes: int = 0
    farm_departure_overtime_minutes: int = 0
    has_overtime: bool = False

    expected_depot_arrival_time: time | None = None
    expected_depot_departure_time: time | None = None
    actual_depot_arrival_time: datetime | None = None
    actual_depot_departure_time: datetime | None = None

    status: str
    on_time_status: str | None = None
    departure_status: str | None = None
    has_discrepancy: bool = False
    discrepancy_notes: str | None = None
    cancelled_reason: str | None = None
    notes: str | None = None

    backload_site_id: str | None = None
    backload_notes: str | None = None
    linked_load_id: str | None = None
    is_backload: bool = False

    created_by: str | None = None
    confirmed_dispatch_by: str | None = None
    confirmed_dispatch_at: datetime | None = None
    confirmed_receipt_by: str | None = None
    confirmed_receipt_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    packaging: list[LoadPackagingOut] = []
    backload_packaging: list[BackloadPackagingOut] = []

    model_config = {"from_attributes": True}
