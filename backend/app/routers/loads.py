"""Load router — packaging loads between sites.

Endpoints:
    GET    /api/loads/                              List loads (with filters)
    POST   /api/loads/                              Create a scheduled load
    GET    /api/loads/{load_id}                     Load detail with lines
    PATCH  /api/loads/{load_id}                     Update (pre-dispatch only)
    DELETE /api/loads/{load_id}                     Delete (scheduled only)
    POST   /api/loads/{load_id}/duplicate           Copy into a new scheduled load
    POST   /api/loads/{load_id}/confirm-farm-arrival
    POST   /api/loads/{load_id}/confirm-farm-departure
    POST   /api/loads/{load_id}/confirm-dispatch    Departed; origin stock −qty
    POST   /api/loads/{load_id}/in-transit
    POST   /api/loads/{load_id}/depot-arrival
    POST   /api/loads/{load_id}/depot-departure
    POST   /api/loads/{load_id}/confirm-receipt     Completed; destination stock +qty
    POST   /api/loads/{load_id}/cancel
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_current_actor
from app.database import get_db
from app.schemas.common import PaginatedResponse
from app.schemas.load import (
    CancelRequest,
    DepotEventConfirm,
    DispatchConfirm,
    DuplicateRequest,
    FarmArrivalConfirm,
    FarmDepartureConfirm,
    LoadCreate,
    LoadOut,
    LoadUpdate,
    ReceiptConfirm,
)
from app.services import loads as load_service

router = APIRouter()


# ── Queries ──────────────────────────────────────────────────

@router.get("/", response_model=PaginatedResponse[LoadOut])
async def list_loads(
    status_filter: str | None = Query(None, alias="status"),
    origin_site_id: str | None = Query(None),
    destination_site_id: str | None = Query(None),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    vehicle_id: str | None = Query(None),
    driver_id: str | None = Query(None),
    channel_id: str | None = Query(None),
    has_discrepancy: bool | None = Query(None),
    has_overtime: bool | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    _actor: str = Depends(get_current_actor),
):
    items, total = await load_service.list_loads(
        db,
        status=status_filter,
        origin_site_id=origin_site_id,
        destination_site_id=destination_site_id,
        start_date=start_date,
        end_date=end_date,
        vehicle_id=vehicle_id,
        driver_id=driver_id,
        channel_id=channel_id,
        has_discrepancy=has_discrepancy,
        has_overtime=has_overtime,
        limit=limit,
        offset=offset,
    )
    return PaginatedResponse(
        items=[LoadOut.model_validate(load) for load in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{load_id}", response_model=LoadOut)
async def get_load(
    load_id: str,
    db: AsyncSession = Depends(get_db),
    _actor: str = Depends(get_current_actor),
):
    return await load_service.get_load(db, load_id)


# ── Create / edit ───────────────────────────────────────────

@router.post("/", response_model=LoadOut, status_code=status.HTTP_201_CREATED)
async def create_load(
    body: LoadCreate,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    return await load_service.create_load(db, body, actor_id=actor)


@router.patch("/{load_id}", response_model=LoadOut)
async def update_load(
    load_id: str,
    body: LoadUpdate,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    return await load_service.update_load(db, load_id, body, actor_id=actor)


@router.delete("/{load_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_load(
    load_id: str,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    await load_service.delete_load(db, load_id, actor_id=actor)


@router.post("/{load_id}/duplicate", response_model=LoadOut, status_code=status.HTTP_201_CREATED)
async def duplicate_load(
    load_id: str,
    body: DuplicateRequest | None = None,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    dispatch_date = body.dispatch_date if body else None
    return await load_service.duplicate_load(db, load_id, dispatch_date, actor_id=actor)


# ── Farm timing ─────────────────────────────────────────────

@router.post("/{load_id}/confirm-farm-arrival", response_model=LoadOut)
async def confirm_farm_arrival(
    load_id: str,
    body: FarmArrivalConfirm | None = None,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    actual = body.actual_farm_arrival_time if body else None
    return await load_service.confirm_farm_arrival(db, load_id, actual, actor_id=actor)


@router.post("/{load_id}/confirm-farm-departure", response_model=LoadOut)
async def confirm_farm_departure(
    load_id: str,
    body: FarmDepartureConfirm | None = None,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    actual = body.actual_farm_departure_time if body else None
    return await load_service.confirm_farm_departure(db, load_id, actual, actor_id=actor)


# ── Movement of the load ────────────────────────────────────

@router.post("/{load_id}/confirm-dispatch", response_model=LoadOut)
async def confirm_dispatch(
    load_id: str,
    body: DispatchConfirm | None = None,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    actual = body.actual_departure_time if body else None
    return await load_service.dispatch_load(db, load_id, actual, actor_id=actor)


@router.post("/{load_id}/in-transit", response_model=LoadOut)
async def mark_in_transit(
    load_id: str,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    return await load_service.mark_in_transit(db, load_id, actor_id=actor)


@router.post("/{load_id}/depot-arrival", response_model=LoadOut)
async def confirm_depot_arrival(
    load_id: str,
    body: DepotEventConfirm | None = None,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    timestamp = body.timestamp if body else None
    return await load_service.confirm_depot_arrival(db, load_id, timestamp, actor_id=actor)


@router.post("/{load_id}/depot-departure", response_model=LoadOut)
async def confirm_depot_departure(
    load_id: str,
    body: DepotEventConfirm | None = None,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    timestamp = body.timestamp if body else None
    return await load_service.confirm_depot_departure(db, load_id, timestamp, actor_id=actor)


@router.post("/{load_id}/confirm-receipt", response_model=LoadOut)
async def confirm_receipt(
    load_id: str,
    body: ReceiptConfirm | None = None,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    return await load_service.receive_load(db, load_id, body or ReceiptConfirm(), actor_id=actor)


@router.post("/{load_id}/cancel", response_model=LoadOut)
async def cancel_load(
    load_id: str,
    body: CancelRequest | None = None,
    db: AsyncSession = Depends(get_db),
    actor: str = Depends(get_current_actor),
):
    reason = body.reason if body else None
    return await load_service.cancel_load(db, load_id, reason, actor_id=actor)
