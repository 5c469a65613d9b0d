"""Load lifecycle service — state transitions and their inventory effects.

Every mutating operation runs inside the caller's session and flushes,
never commits: the request-scoped session (app.database.get_db) commits
once the whole operation succeeded and rolls back otherwise, so a load
is never left half-transitioned.

State guards are enforced by the UPDATE itself
(`WHERE id = :id AND status IN (...)`).  Zero rows affected means another
request got there first (or the load is in the wrong state) and raises
InvalidStateError before any inventory is touched, so two concurrent
dispatches of one load decrement the origin exactly once.

    create            → scheduled
    confirm_farm_*    (pre-dispatch; overtime vs. expected farm times)
    dispatch          scheduled|loading → departed     (origin −qty)
    mark_in_transit   departed → in_transit
    confirm_depot_*   passthrough depot stamps
    receive           departed|in_transit|arrived_depot → completed
                      (destination +received, missing_packaging alerts,
                       backload transfer)
    cancel            any non-terminal → cancelled     (origin refunded
                      when already dispatched)
    duplicate / update / delete
"""

import logging
from datetime import date, datetime

from sqlalchemy import delete as sa_delete
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.middleware.exceptions import InvalidStateError, NotFoundError, ValidationError
from app.models.load import (
    IN_FLIGHT_STATUSES,
    NON_TERMINAL_STATUSES,
    PRE_DISPATCH_STATUSES,
    BackloadPackaging,
    Load,
    LoadPackaging,
)
from app.models.site import PackagingType, Site
from app.schemas.load import (
    BackloadPackagingIn,
    LoadCreate,
    LoadUpdate,
    ReceiptConfirm,
)
from app.services import timing as timing_eval
from app.services.alerts import build_missing_packaging_alert
from app.services.inventory import apply_movement
from app.services.timing import TimingDefaults, as_naive_utc
from app.utils.numbering import generate_load_number

logger = logging.getLogger("packtrack.loads")


# ── Helpers ──────────────────────────────────────────────────

async def get_load(db: AsyncSession, load_id: str) -> Load:
    """Return the Load aggregate (load + packaging lines + backload lines)."""
    result = await db.execute(
        select(Load)
        .where(Load.id == load_id)
        .execution_options(populate_existing=True)
    )
    load = result.scalar_one_or_none()
    if not load:
        raise NotFoundError("Load", load_id)
    return load


def _require_status(load: Load, allowed: tuple[str, ...], action: str) -> None:
    if load.status not in allowed:
        raise InvalidStateError(
            f"Cannot {action} load {load.load_number} in status '{load.status}'",
            current_status=load.status,
        )


async def _guarded_update(
    db: AsyncSession,
    load_id: str,
    allowed: tuple[str, ...],
    values: dict,
    action: str,
    *extra_criteria,
    actor_id: str | None = None,
) -> None:
    """Apply `values` only if the load is still in an allowed status.

    Raises NotFoundError / InvalidStateError when no row matched.
    """
    stmt = (
        update(Load)
        .where(Load.id == load_id, Load.status.in_(allowed), *extra_criteria)
        .values(**values, updated_by=actor_id, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    if result.rowcount == 1:
        return

    current = (
        await db.execute(select(Load.status).where(Load.id == load_id))
    ).scalar_one_or_none()
    if current is None:
        raise NotFoundError("Load", load_id)
    raise InvalidStateError(
        f"Cannot {action} load {load_id}: already transitioned (status '{current}')",
        current_status=current,
    )


def _now(value: datetime | None) -> datetime:
    return as_naive_utc(value) if value else datetime.utcnow()


async def _require_site(db: AsyncSession, site_id: str, role: str) -> Site:
    site = await db.get(Site, site_id)
    if not site:
        raise ValidationError(f"{role} site not found: {site_id}")
    return site


async def _validate_packaging_types(db: AsyncSession, type_ids: set[str]) -> None:
    if not type_ids:
        return
    result = await db.execute(
        select(PackagingType.id).where(PackagingType.id.in_(type_ids))
    )
    found = {row[0] for row in result.all()}
    missing = sorted(type_ids - found)
    if missing:
        raise ValidationError(f"Packaging type not found: {', '.join(missing)}")


def _backload_rows(load_id: str, lines: list[BackloadPackagingIn]) -> list[BackloadPackaging]:
    return [
        BackloadPackaging(
            load_id=load_id,
            packaging_type_id=bl.packaging_type_id,
            quantity_returned=bl.quantity_returned,
            quantity_damaged=bl.quantity_damaged,
            notes=bl.notes,
        )
        for bl in lines
    ]


# ── Create / duplicate ───────────────────────────────────────

async def create_load(
    db: AsyncSession,
    body: LoadCreate,
    actor_id: str | None = None,
) -> Load:
    """Create a scheduled load with its packaging lines.

    Raises:
        ValidationError: unknown site or packaging type, origin equals
        destination, no lines, or a line quantity ≤ 0.
    """
    if not body.packaging:
        raise ValidationError("A load needs at least one packaging line")
    for line in body.packaging:
        if line.quantity <= 0:
            raise ValidationError(
                f"Quantity for packaging type {line.packaging_type_id} must be positive"
            )
    if body.origin_site_id == body.destination_site_id:
        raise ValidationError("Destination site must differ from origin site")

    origin = await _require_site(db, body.origin_site_id, "Origin")
    await _require_site(db, body.destination_site_id, "Destination")
    if body.backload_site_id:
        if body.backload_site_id == body.destination_site_id:
            raise ValidationError("Backload site must differ from destination site")
        await _require_site(db, body.backload_site_id, "Backload")
    await _validate_packaging_types(
        db,
        {p.packaging_type_id for p in body.packaging}
        | {bp.packaging_type_id for bp in body.backload_packaging},
    )

    load_number = await generate_load_number(db, origin.code, body.dispatch_date)

    load = Load(
        load_number=load_number,
        origin_site_id=body.origin_site_id,
        destination_site_id=body.destination_site_id,
        channel_id=body.channel_id,
        vehicle_id=body.vehicle_id,
        driver_id=body.driver_id,
        dispatch_date=body.dispatch_date,
        expected_arrival_date=body.expected_arrival_date,
        scheduled_departure_time=body.scheduled_departure_time,
        estimated_arrival_time=body.estimated_arrival_time,
        expected_farm_arrival_time=body.expected_farm_arrival_time,
        expected_farm_departure_time=body.expected_farm_departure_time,
        expected_depot_arrival_time=body.expected_depot_arrival_time,
        expected_depot_departure_time=body.expected_depot_departure_time,
        backload_site_id=body.backload_site_id,
        backload_notes=body.backload_notes,
        linked_load_id=body.linked_load_id,
        is_backload=body.is_backload,
        notes=body.notes,
        status="scheduled",
        has_discrepancy=False,
        has_overtime=False,
        farm_arrival_overtime_minutes=0,
        farm_departure_overtime_minutes=0,
        created_by=actor_id,
    )
    db.add(load)
    await db.flush()  # populate load.id

    for p in body.packaging:
        db.add(LoadPackaging(
            load_id=load.id,
            packaging_type_id=p.packaging_type_id,
            quantity_dispatched=p.quantity,
            quantity_damaged=0,
            quantity_missing=0,
            product_type_id=p.product_type_id,
            product_variety_id=p.product_variety_id,
            product_grade_id=p.product_grade_id,
            weight_kg=p.weight_kg,
            notes=p.notes,
        ))
    db.add_all(_backload_rows(load.id, body.backload_packaging))
    await db.flush()

    logger.info(
        "Load %s created: %s → %s, %d lines, by %s",
        load_number, body.origin_site_id, body.destination_site_id,
        len(body.packaging), actor_id,
    )
    return await get_load(db, load.id)


async def duplicate_load(
    db: AsyncSession,
    load_id: str,
    dispatch_date: date | None = None,
    actor_id: str | None = None,
) -> Load:
    """Copy a load's route, crew and packaging quantities into a new scheduled load.

    The original load and inventory are untouched; the copy carries no
    received / damaged / missing values and no backload.
    """
    original = await get_load(db, load_id)
    new_date = dispatch_date or original.dispatch_date

    expected_arrival_date = None
    if original.expected_arrival_date:
        expected_arrival_date = new_date + (original.expected_arrival_date - original.dispatch_date)

    load_number = await generate_load_number(db, original.origin_site.code, new_date)

    copy = Load(
        load_number=load_number,
        origin_site_id=original.origin_site_id,
        destination_site_id=original.destination_site_id,
        channel_id=original.channel_id,
        vehicle_id=original.vehicle_id,
        driver_id=original.driver_id,
        dispatch_date=new_date,
        expected_arrival_date=expected_arrival_date,
        scheduled_departure_time=original.scheduled_departure_time,
        estimated_arrival_time=original.estimated_arrival_time,
        expected_farm_arrival_time=original.expected_farm_arrival_time,
        expected_farm_departure_time=original.expected_farm_departure_time,
        expected_depot_arrival_time=original.expected_depot_arrival_time,
        expected_depot_departure_time=original.expected_depot_departure_time,
        notes=original.notes,
        status="scheduled",
        has_discrepancy=False,
        has_overtime=False,
        farm_arrival_overtime_minutes=0,
        farm_departure_overtime_minutes=0,
        created_by=actor_id,
    )
    db.add(copy)
    await db.flush()

    for line in original.packaging:
        db.add(LoadPackaging(
            load_id=copy.id,
            packaging_type_id=line.packaging_type_id,
            quantity_dispatched=line.quantity_dispatched,
            quantity_damaged=0,
            quantity_missing=0,
            product_type_id=line.product_type_id,
            product_variety_id=line.product_variety_id,
            product_grade_id=line.product_grade_id,
            weight_kg=line.weight_kg,
            notes=line.notes,
        ))
    await db.flush()

    logger.info("Load %s duplicated as %s by %s", original.load_number, load_number, actor_id)
    return await get_load(db, copy.id)


# ── Update / delete (pre-dispatch only) ──────────────────────

async def update_load(
    db: AsyncSession,
    load_id: str,
    body: LoadUpdate,
    actor_id: str | None = None,
) -> Load:
    """Patch a load that has not been dispatched yet.  No inventory effect."""
    load = await get_load(db, load_id)
    _require_status(load, PRE_DISPATCH_STATUSES, "update")

    fields = body.model_dump(exclude_unset=True)
    replace_backload = "backload_packaging" in fields
    fields.pop("backload_packaging", None)
    for required in ("origin_site_id", "destination_site_id", "dispatch_date", "status", "is_backload"):
        if required in fields and fields[required] is None:
            del fields[required]
    backload_lines = body.backload_packaging or []

    origin_id = fields.get("origin_site_id") or load.origin_site_id
    destination_id = fields.get("destination_site_id") or load.destination_site_id
    if origin_id == destination_id:
        raise ValidationError("Destination site must differ from origin site")
    if "origin_site_id" in fields:
        await _require_site(db, origin_id, "Origin")
    if "destination_site_id" in fields:
        await _require_site(db, destination_id, "Destination")
    backload_site_id = fields.get("backload_site_id", load.backload_site_id)
    if backload_site_id:
        if backload_site_id == destination_id:
            raise ValidationError("Backload site must differ from destination site")
        if "backload_site_id" in fields:
            await _require_site(db, backload_site_id, "Backload")
    if replace_backload:
        await _validate_packaging_types(db, {bl.packaging_type_id for bl in backload_lines})

    await _guarded_update(
        db, load_id, PRE_DISPATCH_STATUSES, fields, "update", actor_id=actor_id,
    )

    if replace_backload:
        # delete-orphan cascade removes the old rows on flush
        load.backload_packaging.clear()
        load.backload_packaging.extend(_backload_rows(load_id, backload_lines))
    await db.flush()

    logger.info("Load %s updated (%s) by %s", load.load_number, ", ".join(sorted(fields)) or "no fields", actor_id)
    return await get_load(db, load_id)


async def delete_load(
    db: AsyncSession,
    load_id: str,
    actor_id: str | None = None,
) -> None:
    """Hard-delete a load that is still scheduled (nothing has moved yet)."""
    load = await get_load(db, load_id)
    if load.status != "scheduled":
        raise InvalidStateError(
            f"Can only delete scheduled loads (load {load.load_number} is '{load.status}')",
            current_status=load.status,
        )
    load_number = load.load_number

    await db.execute(
        update(Load)
        .where(Load.linked_load_id == load_id)
        .values(linked_load_id=None)
        .execution_options(synchronize_session=False)
    )
    await db.execute(sa_delete(LoadPackaging).where(LoadPackaging.load_id == load_id))
    await db.execute(sa_delete(BackloadPackaging).where(BackloadPackaging.load_id == load_id))
    result = await db.execute(
        sa_delete(Load)
        .where(Load.id == load_id, Load.status == "scheduled")
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise InvalidStateError(
            f"Load {load_number} changed status while being deleted",
        )
    db.expunge(load)

    logger.info("Load %s deleted by %s", load_number, actor_id)


# ── Farm timing ──────────────────────────────────────────────

async def confirm_farm_arrival(
    db: AsyncSession,
    load_id: str,
    actual_time: datetime | None = None,
    actor_id: str | None = None,
    timing: TimingDefaults | None = None,
) -> Load:
    """Record the truck's arrival at the farm and its overtime, if any."""
    timing = timing or TimingDefaults.from_settings()
    load = await get_load(db, load_id)
    _require_status(load, PRE_DISPATCH_STATUSES, "confirm farm arrival for")
    if load.actual_farm_arrival_time is not None:
        raise InvalidStateError(
            f"Farm arrival already recorded for load {load.load_number}",
            current_status=load.status,
        )

    actual = _now(actual_time)
    expected = timing.farm_arrival_for(load.expected_farm_arrival_time)
    overtime = timing_eval.overtime_minutes(expected, actual, load.dispatch_date)

    await _guarded_update(
        db, load_id, PRE_DISPATCH_STATUSES,
        {
            "actual_farm_arrival_time": actual,
            "farm_arrival_overtime_minutes": overtime,
            "has_overtime": overtime > 0,
            "confirmed_farm_arrival_by": actor_id,
            "confirmed_farm_arrival_at": datetime.utcnow(),
        },
        "confirm farm arrival for",
        Load.actual_farm_arrival_time.is_(None),
        actor_id=actor_id,
    )
    logger.info(
        "Load %s farm arrival at %s (expected %s, overtime %d min)",
        load.load_number, actual.isoformat(), expected.isoformat(), overtime,
    )
    return await get_load(db, load_id)


async def confirm_farm_departure(
    db: AsyncSession,
    load_id: str,
    actual_time: datetime | None = None,
    actor_id: str | None = None,
    timing: TimingDefaults | None = None,
) -> Load:
    """Record the truck leaving the farm; requires a recorded arrival."""
    timing = timing or TimingDefaults.from_settings()
    load = await get_load(db, load_id)
    _require_status(load, NON_TERMINAL_STATUSES, "confirm farm departure for")
    if load.actual_farm_arrival_time is None:
        raise InvalidStateError(
            f"Farm arrival must be confirmed before departure (load {load.load_number})",
            current_status=load.status,
        )
    if load.actual_farm_departure_time is not None:
        raise InvalidStateError(
            f"Farm departure already recorded for load {load.load_number}",
            current_status=load.status,
        )

    actual = _now(actual_time)
    expected = timing.farm_departure_for(load.expected_farm_departure_time)
    overtime = timing_eval.overtime_minutes(expected, actual, load.dispatch_date)

    await _guarded_update(
        db, load_id, NON_TERMINAL_STATUSES,
        {
            "actual_farm_departure_time": actual,
            "farm_departure_overtime_minutes": overtime,
            "has_overtime": overtime > 0 or (load.farm_arrival_overtime_minutes or 0) > 0,
            "confirmed_farm_departure_by": actor_id,
            "confirmed_farm_departure_at": datetime.utcnow(),
        },
        "confirm farm departure for",
        Load.actual_farm_arrival_time.is_not(None),
        Load.actual_farm_departure_time.is_(None),
        actor_id=actor_id,
    )
    logger.info(
        "Load %s farm departure at %s (expected %s, overtime %d min)",
        load.load_number, actual.isoformat(), expected.isoformat(), overtime,
    )
    return await get_load(db, load_id)


# ── Dispatch ─────────────────────────────────────────────────

async def dispatch_load(
    db: AsyncSession,
    load_id: str,
    actual_departure_time: datetime | None = None,
    actor_id: str | None = None,
    timing: TimingDefaults | None = None,
) -> Load:
    """Mark the load departed and take its packaging off the origin's stock."""
    timing = timing or TimingDefaults.from_settings()
    load = await get_load(db, load_id)
    _require_status(load, PRE_DISPATCH_STATUSES, "dispatch")

    actual = _now(actual_departure_time)
    dep_status = timing_eval.departure_status(
        load.dispatch_date, load.scheduled_departure_time, actual, timing.tolerance_minutes,
    )

    await _guarded_update(
        db, load_id, PRE_DISPATCH_STATUSES,
        {
            "status": "departed",
            "actual_departure_time": actual,
            "departure_status": dep_status,
            "confirmed_dispatch_by": actor_id,
            "confirmed_dispatch_at": datetime.utcnow(),
        },
        "dispatch",
        actor_id=actor_id,
    )

    for line in load.packaging:
        await apply_movement(
            db,
            site_id=load.origin_site_id,
            packaging_type_id=line.packaging_type_id,
            movement_type="dispatch",
            quantity_delta=-line.quantity_dispatched,
            load_id=load_id,
            recorded_by=actor_id,
        )
    await db.flush()

    logger.info(
        "Load %s dispatched from %s: %d units on %d lines by %s",
        load.load_number, load.origin_site_id,
        sum(line.quantity_dispatched for line in load.packaging),
        len(load.packaging), actor_id,
    )
    return await get_load(db, load_id)


# ── Depot passthroughs ───────────────────────────────────────

async def mark_in_transit(
    db: AsyncSession,
    load_id: str,
    actor_id: str | None = None,
) -> Load:
    await _guarded_update(
        db, load_id, ("departed",), {"status": "in_transit"}, "mark in transit", actor_id=actor_id,
    )
    return await get_load(db, load_id)


async def confirm_depot_arrival(
    db: AsyncSession,
    load_id: str,
    timestamp: datetime | None = None,
    actor_id: str | None = None,
) -> Load:
    await _guarded_update(
        db, load_id, ("departed", "in_transit"),
        {"status": "arrived_depot", "actual_depot_arrival_time": _now(timestamp)},
        "confirm depot arrival for",
        Load.actual_depot_arrival_time.is_(None),
        actor_id=actor_id,
    )
    return await get_load(db, load_id)


async def confirm_depot_departure(
    db: AsyncSession,
    load_id: str,
    timestamp: datetime | None = None,
    actor_id: str | None = None,
) -> Load:
    await _guarded_update(
        db, load_id, ("arrived_depot",),
        {"actual_depot_departure_time": _now(timestamp)},
        "confirm depot departure for",
        Load.actual_depot_departure_time.is_(None),
        actor_id=actor_id,
    )
    return await get_load(db, load_id)


# ── Receipt ──────────────────────────────────────────────────

async def receive_load(
    db: AsyncSession,
    load_id: str,
    body: ReceiptConfirm,
    actor_id: str | None = None,
    timing: TimingDefaults | None = None,
) -> Load:
    """Confirm receipt at the destination and complete the load.

    Lines the caller leaves out are taken as fully received.  Counts that
    disagree with the dispatched quantity are recorded as a discrepancy,
    not rejected.
    """
    timing = timing or TimingDefaults.from_settings()
    load = await get_load(db, load_id)
    _require_status(load, IN_FLIGHT_STATUSES, "receive")

    lines_by_id = {line.id: line for line in load.packaging}
    supplied = {}
    for item in body.packaging:
        if item.line_id not in lines_by_id:
            raise ValidationError(
                f"Packaging line {item.line_id} does not belong to load {load.load_number}"
            )
        if item.line_id in supplied:
            raise ValidationError(f"Packaging line {item.line_id} supplied twice")
        for name in ("quantity_received", "quantity_damaged", "quantity_missing"):
            value = getattr(item, name)
            if value is not None and value < 0:
                raise ValidationError(f"{name} must not be negative")
        supplied[item.line_id] = item

    counts = {}
    for line in load.packaging:
        item = supplied.get(line.id)
        if item is None:
            counts[line.id] = (line.quantity_dispatched, 0, 0, line.notes)
            continue
        received = item.quantity_received
        if received is None:
            received = max(0, line.quantity_dispatched - item.quantity_missing)
        counts[line.id] = (
            received,
            item.quantity_damaged,
            item.quantity_missing,
            item.notes if item.notes is not None else line.notes,
        )

    has_discrepancy = any(
        received != lines_by_id[line_id].quantity_dispatched or damaged > 0 or missing > 0
        for line_id, (received, damaged, missing, _) in counts.items()
    )

    actual = _now(body.actual_arrival_time)
    on_time = timing_eval.arrival_status(
        load.expected_arrival_date,
        load.estimated_arrival_time,
        load.dispatch_date,
        actual,
        timing.tolerance_minutes,
    )

    await _guarded_update(
        db, load_id, IN_FLIGHT_STATUSES,
        {
            "status": "completed",
            "actual_arrival_time": actual,
            "on_time_status": on_time,
            "has_discrepancy": has_discrepancy,
            "discrepancy_notes": body.discrepancy_notes,
            "confirmed_receipt_by": actor_id,
            "confirmed_receipt_at": datetime.utcnow(),
        },
        "receive",
        actor_id=actor_id,
    )

    missing_alerts = 0
    for line in load.packaging:
        received, damaged, missing, notes = counts[line.id]
        line.quantity_received = received
        line.quantity_damaged = damaged
        line.quantity_missing = missing
        line.notes = notes

        if received or damaged:
            await apply_movement(
                db,
                site_id=load.destination_site_id,
                packaging_type_id=line.packaging_type_id,
                movement_type="receipt",
                quantity_delta=received,
                damaged_delta=damaged,
                load_id=load_id,
                recorded_by=actor_id,
            )
        if missing > 0:
            db.add(build_missing_packaging_alert(
                load_id=load_id,
                load_number=load.load_number,
                site_id=load.destination_site_id,
                packaging_type_id=line.packaging_type_id,
                packaging_code=line.packaging_type_code,
                quantity_missing=missing,
            ))
            missing_alerts += 1

    if load.backload_site_id:
        for bl in load.backload_packaging:
            if bl.quantity_returned <= 0:
                continue
            await apply_movement(
                db,
                site_id=load.destination_site_id,
                packaging_type_id=bl.packaging_type_id,
                movement_type="backload_return",
                quantity_delta=-bl.quantity_returned,
                load_id=load_id,
                recorded_by=actor_id,
                notes=f"Backload of load {load.load_number}",
            )
            await apply_movement(
                db,
                site_id=load.backload_site_id,
                packaging_type_id=bl.packaging_type_id,
                movement_type="backload_return",
                quantity_delta=bl.quantity_returned,
                damaged_delta=bl.quantity_damaged,
                load_id=load_id,
                recorded_by=actor_id,
                notes=f"Backload of load {load.load_number}",
            )
    await db.flush()

    logger.info(
        "Load %s received at %s by %s (discrepancy=%s, on_time=%s, missing alerts=%d)",
        load.load_number, load.destination_site_id, actor_id,
        has_discrepancy, on_time, missing_alerts,
    )
    return await get_load(db, load_id)


# ── Cancel ───────────────────────────────────────────────────

async def cancel_load(
    db: AsyncSession,
    load_id: str,
    reason: str | None = None,
    actor_id: str | None = None,
) -> Load:
    """Cancel a non-terminal load.

    A load cancelled after dispatch returns its packaging to the origin
    with adjustment movements, so nothing stays in transit.
    """
    load = await get_load(db, load_id)
    _require_status(load, NON_TERMINAL_STATUSES, "cancel")
    was_dispatched = load.status in IN_FLIGHT_STATUSES

    # Guard on the exact status read above so the refund decision holds
    await _guarded_update(
        db, load_id, (load.status,),
        {
            "status": "cancelled",
            "cancelled_reason": reason,
            "cancelled_by": actor_id,
            "cancelled_at": datetime.utcnow(),
        },
        "cancel",
        actor_id=actor_id,
    )

    if was_dispatched:
        for line in load.packaging:
            await apply_movement(
                db,
                site_id=load.origin_site_id,
                packaging_type_id=line.packaging_type_id,
                movement_type="adjustment",
                quantity_delta=line.quantity_dispatched,
                load_id=load_id,
                recorded_by=actor_id,
                notes=f"Load {load.load_number} cancelled after dispatch",
            )
    await db.flush()

    logger.info(
        "Load %s cancelled by %s (was dispatched: %s)", load.load_number, actor_id, was_dispatched,
    )
    return await get_load(db, load_id)


# ── Reads ────────────────────────────────────────────────────

async def list_loads(
    db: AsyncSession,
    status: str | None = None,
    origin_site_id: str | None = None,
    destination_site_id: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    vehicle_id: str | None = None,
    driver_id: str | None = None,
    channel_id: str | None = None,
    has_discrepancy: bool | None = None,
    has_overtime: bool | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[Load], int]:
    base = select(Load)
    if status:
        base = base.where(Load.status == status)
    if origin_site_id:
        base = base.where(Load.origin_site_id == origin_site_id)
    if destination_site_id:
        base = base.where(Load.destination_site_id == destination_site_id)
    if start_date:
        base = base.where(Load.dispatch_date >= start_date)
    if end_date:
        base = base.where(Load.dispatch_date <= end_date)
    if vehicle_id:
        base = base.where(Load.vehicle_id == vehicle_id)
    if driver_id:
        base = base.where(Load.driver_id == driver_id)
    if channel_id:
        base = base.where(Load.channel_id == channel_id)
    if has_discrepancy is not None:
        base = base.where(Load.has_discrepancy == has_discrepancy)
    if has_overtime is not None:
        base = base.where(Load.has_overtime == has_overtime)

    total = (
        await db.execute(select(func.count()).select_from(base.subquery()))
    ).scalar() or 0
    items = (
        await db.execute(
            base.order_by(Load.dispatch_date.desc(), Load.created_at.desc())
            .limit(limit)
            .offset(offset)
            .execution_options(populate_existing=True)
        )
    ).scalars().all()
    return list(items), total
