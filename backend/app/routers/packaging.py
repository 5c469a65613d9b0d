"""Packaging inventory router — site stock, movement ledger, thresholds.

Endpoints:
    GET  /api/packaging/inventory                 Stock per site / packaging type
    GET  /api/packaging/balance/{packaging_type}  On hand + in transit
    GET  /api/packaging/movements                 Movement history (paginated)
    POST /api/packaging/movements                 Manual ledger entry
    PUT  /api/packaging/thresholds                Create / replace a threshold
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_current_actor
from app.config import settings
from app.database import get_db
from app.models.inventory import SiteInventory, SitePackagingThreshold
from app.schemas.common import PaginatedResponse
from app.schemas.inventory import (
    ManualMovementRequest,
    PackagingBalanceOut,
    PackagingMovementOut,
    SiteInventoryOut,
    ThresholdIn,
    ThresholdOut,
)
from app.services import inventory as inventory_service
from app.services.alerts import set_threshold, stock_status

router = APIRouter()


def _enrich_inventory(
    inventory: SiteInventory, threshold: SitePackagingThreshold | None
) -> SiteInventoryOut:
    out = SiteInventoryOut.model_validate(inventory)
    if threshold and threshold.min_threshold > 0:
        out.min_threshold = threshold.min_threshold
        out.stock_status = stock_status(
            inventory.quantity, threshold.min_threshold, settings.low_stock_warning_ratio
        )
    return out


# ── GET /api/packaging/inventory ────────────────────────────

@router.get("/inventory", response_model=list[SiteInventoryOut])
async def get_inventory(
    site_id: str | None = Query(None),
    packaging_type_id: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    _actor: str = Depends(get_current_actor),
):
    rows = await inventory_service.list_inventory(
        db, site_id=site_id, packaging_type_id=packaging_type_id
    )
    return [_enrich_inventory(inv, threshold) for inv, threshold in rows]


@router.get("/balance/{packaging_type_id}", response_model=PackagingBalanceOut)
async def get_balance(
    packaging_type_id: str,
    db: AsyncSession = Depends(get_db),
    _actor: str = Depends(get_current_actor),
):
    return await inventory_service.packaging_balance(db, packaging_type_id)


# ── Movements ───────────────────────────────────────────────

@router.get("/movements", response_model=PaginatedResponse[PackagingMovementOut])
async def list_movements(
    site_id: str | None = Query(None),
    movement_type: str | None = Query(None),
    load_id: str | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    _actor: str = Depends(get_current_actor),
):
    items, total = await inventory_service.list_movements(
        db,
        site_id=site_id,
        movement_type=movement_type,
        load_id=load_id,
        limit=limit,
        offset=offset,
    )
    return PaginatedResponse(
        items=[PackagingMovementOut.model_validate(m) for m in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.post("/movements", response_model=PackagingMovementOut, status_code=status.HTTP_201_CREATED)
async def record_movement(
    body: ManualMovementRequest,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    movement = await inventory_service.record_manual_movement(
        db,
        site_id=body.site_id,
        packaging_type_id=body.packaging_type_id,
        movement_type=body.movement_type,
        quantity=body.quantity,
        quantity_damaged=body.quantity_damaged,
        notes=body.notes,
        reference_number=body.reference_number,
        actor_id=actor,
    )
    return PackagingMovementOut.model_validate(movement)


# ── Thresholds ──────────────────────────────────────────────

@router.put("/thresholds", response_model=ThresholdOut)
async def put_threshold(
    body: ThresholdIn,
    db: AsyncSession = Depends(get_db),
    _actor: str = Depends(get_current_actor),
):
    threshold = await set_threshold(
        db,
        site_id=body.site_id,
        packaging_type_id=body.packaging_type_id,
        min_threshold=body.min_threshold,
        max_threshold=body.max_threshold,
        alert_enabled=body.alert_enabled,
    )
    return ThresholdOut.model_validate(threshold)
