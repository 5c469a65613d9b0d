"""Inventory ledger — the single source of truth for packaging on hand.

apply_movement() is the only writer of SiteInventory.  It appends one
PackagingMovement and applies the deltas to the (site, packaging type)
row in a single INSERT … ON CONFLICT DO UPDATE statement, so the row is
created on first use and concurrent writers add relative deltas under
the row lock instead of overwriting each other.

No floor is enforced: a negative on-hand quantity is logged as a
data-quality warning and left for a manual adjustment to correct.
"""

import logging
import uuid
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.middleware.exceptions import NotFoundError, ValidationError
from app.models.inventory import (
    MANUAL_MOVEMENT_TYPES,
    MOVEMENT_TYPES,
    PackagingMovement,
    SiteInventory,
    SitePackagingThreshold,
)
from app.models.load import IN_FLIGHT_STATUSES, Load, LoadPackaging
from app.models.site import PackagingType, Site

logger = logging.getLogger("packtrack.inventory")

# movement type → running total bumped on SiteInventory
_TOTAL_COLUMNS = {
    "dispatch": "total_dispatched",
    "receipt": "total_received",
    "backload_return": "total_returned",
}


def _dialect_insert(db: AsyncSession):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise RuntimeError(f"Unsupported database dialect for inventory upsert: {dialect}")
    return insert


async def apply_movement(
    db: AsyncSession,
    *,
    site_id: str,
    packaging_type_id: str,
    movement_type: str,
    quantity_delta: int,
    damaged_delta: int = 0,
    load_id: str | None = None,
    recorded_by: str | None = None,
    notes: str | None = None,
    reference_number: str | None = None,
) -> PackagingMovement:
    """Append a movement and add its deltas to the site inventory row.

    Direction comes from the sign of quantity_delta (or of damaged_delta
    for damage-only movements).  Returns the unflushed movement row.
    """
    if movement_type not in MOVEMENT_TYPES:
        raise ValidationError(f"Unknown movement type: {movement_type}")

    sign_source = quantity_delta if quantity_delta else damaged_delta
    direction = "out" if sign_source < 0 else "in"

    now = datetime.utcnow()
    totals = {col: 0 for col in _TOTAL_COLUMNS.values()}
    total_col = _TOTAL_COLUMNS.get(movement_type)
    if movement_type == "backload_return" and quantity_delta < 0:
        # only the receiving site counts a return
        total_col = None
    if total_col:
        totals[total_col] = abs(quantity_delta)

    insert = _dialect_insert(db)
    stmt = insert(SiteInventory).values(
        id=str(uuid.uuid4()),
        site_id=site_id,
        packaging_type_id=packaging_type_id,
        quantity=quantity_delta,
        quantity_damaged=damaged_delta,
        handling_count=1,
        updated_at=now,
        **totals,
    )
    update_set = {
        "quantity": SiteInventory.quantity + quantity_delta,
        "quantity_damaged": SiteInventory.quantity_damaged + damaged_delta,
        "handling_count": SiteInventory.handling_count + 1,
        "updated_at": now,
    }
    if total_col:
        update_set[total_col] = getattr(SiteInventory, total_col) + abs(quantity_delta)
    stmt = stmt.on_conflict_do_update(
        index_elements=[SiteInventory.site_id, SiteInventory.packaging_type_id],
        set_=update_set,
    ).returning(SiteInventory.quantity)

    new_quantity = (await db.execute(stmt)).scalar_one()
    if new_quantity < 0:
        logger.warning(
            "Negative on-hand after %s: site=%s packaging_type=%s quantity=%d",
            movement_type, site_id, packaging_type_id, new_quantity,
        )

    movement = PackagingMovement(
        id=str(uuid.uuid4()),
        movement_type=movement_type,
        site_id=site_id,
        packaging_type_id=packaging_type_id,
        load_id=load_id,
        quantity=abs(quantity_delta),
        quantity_damaged=damaged_delta,
        direction=direction,
        reference_number=reference_number,
        notes=notes,
        recorded_by=recorded_by,
        recorded_at=now,
    )
    db.add(movement)
    return movement


async def _require_site(db: AsyncSession, site_id: str) -> Site:
    site = await db.get(Site, site_id)
    if not site:
        raise NotFoundError("Site", site_id)
    return site


async def _require_packaging_type(db: AsyncSession, packaging_type_id: str) -> PackagingType:
    packaging_type = await db.get(PackagingType, packaging_type_id)
    if not packaging_type:
        raise NotFoundError("Packaging type", packaging_type_id)
    return packaging_type


async def record_manual_movement(
    db: AsyncSession,
    *,
    site_id: str,
    packaging_type_id: str,
    movement_type: str,
    quantity: int,
    quantity_damaged: int = 0,
    notes: str | None = None,
    reference_number: str | None = None,
    actor_id: str | None = None,
) -> PackagingMovement:
    """Manual ledger entry (adjustment, purchase, disposal, damage, …).

    Quantities are signed; the caller chooses the direction.
    """
    if movement_type not in MANUAL_MOVEMENT_TYPES:
        raise ValidationError(
            f"Movement type '{movement_type}' cannot be recorded manually"
        )
    if quantity == 0 and quantity_damaged == 0:
        raise ValidationError("Movement must change quantity or quantity_damaged")

    await _require_site(db, site_id)
    await _require_packaging_type(db, packaging_type_id)

    movement = await apply_movement(
        db,
        site_id=site_id,
        packaging_type_id=packaging_type_id,
        movement_type=movement_type,
        quantity_delta=quantity,
        damaged_delta=quantity_damaged,
        recorded_by=actor_id,
        notes=notes,
        reference_number=reference_number,
    )
    if movement_type == "adjustment":
        # An adjustment is a physical count reconciliation
        inventory = await get_site_inventory(db, site_id, packaging_type_id)
        inventory.last_counted_at = movement.recorded_at
        inventory.last_counted_by = actor_id
    await db.flush()
    logger.info(
        "Manual %s at site %s: %+d units (%+d damaged) by %s",
        movement_type, site_id, quantity, quantity_damaged, actor_id,
    )
    return movement


async def get_site_inventory(
    db: AsyncSession, site_id: str, packaging_type_id: str
) -> SiteInventory | None:
    result = await db.execute(
        select(SiteInventory)
        .where(
            SiteInventory.site_id == site_id,
            SiteInventory.packaging_type_id == packaging_type_id,
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def list_inventory(
    db: AsyncSession,
    site_id: str | None = None,
    packaging_type_id: str | None = None,
) -> list[tuple[SiteInventory, SitePackagingThreshold | None]]:
    """Inventory rows with their configured threshold (if any)."""
    stmt = (
        select(SiteInventory, SitePackagingThreshold)
        .outerjoin(
            SitePackagingThreshold,
            (SitePackagingThreshold.site_id == SiteInventory.site_id)
            & (SitePackagingThreshold.packaging_type_id == SiteInventory.packaging_type_id),
        )
        .order_by(SiteInventory.site_id, SiteInventory.packaging_type_id)
        .execution_options(populate_existing=True)
    )
    if site_id:
        stmt = stmt.where(SiteInventory.site_id == site_id)
    if packaging_type_id:
        stmt = stmt.where(SiteInventory.packaging_type_id == packaging_type_id)

    result = await db.execute(stmt)
    return [(row[0], row[1]) for row in result.all()]


async def list_movements(
    db: AsyncSession,
    site_id: str | None = None,
    movement_type: str | None = None,
    load_id: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[PackagingMovement], int]:
    base = select(PackagingMovement)
    if site_id:
        base = base.where(PackagingMovement.site_id == site_id)
    if movement_type:
        base = base.where(PackagingMovement.movement_type == movement_type)
    if load_id:
        base = base.where(PackagingMovement.load_id == load_id)

    total = (
        await db.execute(select(func.count()).select_from(base.subquery()))
    ).scalar() or 0

    items = (
        await db.execute(
            base.order_by(PackagingMovement.recorded_at.desc())
            .limit(limit)
            .offset(offset)
        )
    ).scalars().all()
    return list(items), total


async def packaging_balance(db: AsyncSession, packaging_type_id: str) -> dict:
    """On-hand across all sites plus units dispatched but not yet received.

    on_hand + in_transit stays constant across dispatch and receipt; only
    manual movements (purchase, loss, disposal, …) and receipt shortfalls
    change it.
    """
    on_hand = (
        await db.execute(
            select(func.coalesce(func.sum(SiteInventory.quantity), 0)).where(
                SiteInventory.packaging_type_id == packaging_type_id
            )
        )
    ).scalar() or 0

    in_transit = (
        await db.execute(
            select(func.coalesce(func.sum(LoadPackaging.quantity_dispatched), 0))
            .join(Load, Load.id == LoadPackaging.load_id)
            .where(
                LoadPackaging.packaging_type_id == packaging_type_id,
                Load.status.in_(IN_FLIGHT_STATUSES),
            )
        )
    ).scalar() or 0

    return {
        "packaging_type_id": packaging_type_id,
        "on_hand": int(on_hand),
        "in_transit": int(in_transit),
        "total": int(on_hand) + int(in_transit),
    }
