"""Pydantic schemas for alerts."""

from datetime import datetime

from pydantic import BaseModel


class AlertOut(BaseModel):
    id: str
    alert_type: str
    severity: str
    site_id: str | None = None
    load_id: str | None = None
    packaging_type_id: str | None = None
    message: str
    is_acknowledged: bool
    acknowledged_by: str | None = None
    acknowledged_at: datetime | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
