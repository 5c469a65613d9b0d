"""Alert router.

Endpoints:
    GET  /api/alerts/                       List alerts (with filters)
    POST /api/alerts/evaluate               Run the low-stock check now
    POST /api/alerts/{alert_id}/acknowledge Acknowledge an alert
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_current_actor
from app.database import get_db
from app.schemas.alert import AlertOut
from app.schemas.common import PaginatedResponse
from app.services import alerts as alert_service

router = APIRouter()


@router.get("/", response_model=PaginatedResponse[AlertOut])
async def list_alerts(
    acknowledged: bool | None = Query(None),
    severity: str | None = Query(None),
    alert_type: str | None = Query(None),
    site_id: str | None = Query(None),
    load_id: str | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    _actor: str = Depends(get_current_actor),
):
    items, total = await alert_service.list_alerts(
        db,
        acknowledged=acknowledged,
        severity=severity,
        alert_type=alert_type,
        site_id=site_id,
        load_id=load_id,
        limit=limit,
        offset=offset,
    )
    return PaginatedResponse(
        items=[AlertOut.model_validate(a) for a in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.post("/evaluate", response_model=list[AlertOut])
async def evaluate_now(
    db: AsyncSession = Depends(get_db),
    _actor: str = Depends(get_current_actor),
):
    """Evaluate every threshold and return the alerts raised by this run."""
    alerts = await alert_service.evaluate_thresholds(db)
    return [AlertOut.model_validate(a) for a in alerts]


@router.post("/{alert_id}/acknowledge", response_model=AlertOut)
async def acknowledge(
    alert_id: str,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    alert = await alert_service.acknowledge_alert(db, alert_id, actor)
    return AlertOut.model_validate(alert)
