"""Alert service — low-stock threshold evaluation and alert bookkeeping.

evaluate_thresholds() runs independently of load transitions (scheduler
or on demand).  For each enabled threshold it compares the current
on-hand quantity to min_threshold:

    quantity ≤ min                       → critical
    min < quantity ≤ min × warning_ratio → warning
    otherwise                            → no alert

A threshold of 0 means "not configured".  A (site, type, severity) that
already has an unacknowledged low_stock alert is not alerted again.

The missing_packaging alert is built here but created synchronously by
the receipt transition, inside its transaction.
"""

import logging
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.middleware.exceptions import NotFoundError, ValidationError
from app.models.alert import Alert
from app.models.inventory import SiteInventory, SitePackagingThreshold
from app.models.site import PackagingType, Site

logger = logging.getLogger("packtrack.alerts")


def stock_status(quantity: int, min_threshold: int | None, warning_ratio: float | None = None) -> str:
    """ok | warning | critical for an on-hand quantity."""
    if not min_threshold or min_threshold <= 0:
        return "ok"
    ratio = warning_ratio if warning_ratio is not None else settings.low_stock_warning_ratio
    if quantity <= min_threshold:
        return "critical"
    if quantity <= min_threshold * ratio:
        return "warning"
    return "ok"


async def evaluate_thresholds(
    db: AsyncSession,
    warning_ratio: float | None = None,
) -> list[Alert]:
    """Create low_stock alerts for every site/type at or near its minimum."""
    stmt = (
        select(
            SitePackagingThreshold,
            func.coalesce(SiteInventory.quantity, 0).label("quantity"),
            Site.code.label("site_code"),
            PackagingType.code.label("packaging_code"),
        )
        .join(Site, Site.id == SitePackagingThreshold.site_id)
        .join(PackagingType, PackagingType.id == SitePackagingThreshold.packaging_type_id)
        .outerjoin(
            SiteInventory,
            (SiteInventory.site_id == SitePackagingThreshold.site_id)
            & (SiteInventory.packaging_type_id == SitePackagingThreshold.packaging_type_id),
        )
        .where(SitePackagingThreshold.alert_enabled == True)  # noqa: E712
    )
    rows = (await db.execute(stmt)).all()

    open_result = await db.execute(
        select(Alert.site_id, Alert.packaging_type_id, Alert.severity).where(
            Alert.alert_type == "low_stock",
            Alert.is_acknowledged == False,  # noqa: E712
        )
    )
    already_open = {tuple(r) for r in open_result.all()}

    alerts: list[Alert] = []
    for row in rows:
        threshold = row[0]
        quantity = int(row.quantity)
        severity = stock_status(quantity, threshold.min_threshold, warning_ratio)
        if severity == "ok":
            continue
        key = (threshold.site_id, threshold.packaging_type_id, severity)
        if key in already_open:
            continue

        alert = Alert(
            alert_type="low_stock",
            severity=severity,
            site_id=threshold.site_id,
            packaging_type_id=threshold.packaging_type_id,
            message=(
                f"{row.packaging_code} stock at {row.site_code} is {quantity} "
                f"(minimum {threshold.min_threshold})"
            ),
        )
        db.add(alert)
        alerts.append(alert)
        already_open.add(key)

    await db.flush()
    logger.info(
        "Threshold evaluation: %d thresholds checked, %d new alerts",
        len(rows), len(alerts),
    )
    return alerts


def build_missing_packaging_alert(
    load_id: str,
    load_number: str,
    site_id: str,
    packaging_type_id: str,
    packaging_code: str | None,
    quantity_missing: int,
) -> Alert:
    return Alert(
        alert_type="missing_packaging",
        severity="warning",
        site_id=site_id,
        load_id=load_id,
        packaging_type_id=packaging_type_id,
        message=(
            f"Load {load_number}: {quantity_missing} "
            f"{packaging_code or 'packaging units'} missing on receipt"
        ),
    )


async def acknowledge_alert(db: AsyncSession, alert_id: str, actor_id: str | None) -> Alert:
    """Mark an alert acknowledged.  Acknowledging twice keeps the first stamp."""
    alert = await db.get(Alert, alert_id)
    if not alert:
        raise NotFoundError("Alert", alert_id)
    if not alert.is_acknowledged:
        alert.is_acknowledged = True
        alert.acknowledged_by = actor_id
        alert.acknowledged_at = datetime.utcnow()
        await db.flush()
    return alert


async def list_alerts(
    db: AsyncSession,
    acknowledged: bool | None = None,
    severity: str | None = None,
    alert_type: str | None = None,
    site_id: str | None = None,
    load_id: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[Alert], int]:
    base = select(Alert)
    if acknowledged is not None:
        base = base.where(Alert.is_acknowledged == acknowledged)
    if severity:
        base = base.where(Alert.severity == severity)
    if alert_type:
        base = base.where(Alert.alert_type == alert_type)
    if site_id:
        base = base.where(Alert.site_id == site_id)
    if load_id:
        base = base.where(Alert.load_id == load_id)

    total = (
        await db.execute(select(func.count()).select_from(base.subquery()))
    ).scalar() or 0
    items = (
        await db.execute(
            base.order_by(Alert.created_at.desc()).limit(limit).offset(offset)
        )
    ).scalars().all()
    return list(items), total


async def set_threshold(
    db: AsyncSession,
    *,
    site_id: str,
    packaging_type_id: str,
    min_threshold: int,
    max_threshold: int | None = None,
    alert_enabled: bool = True,
) -> SitePackagingThreshold:
    """Create or replace the threshold for a (site, packaging type)."""
    if min_threshold < 0:
        raise ValidationError("min_threshold must be zero or positive")
    if max_threshold is not None and max_threshold < min_threshold:
        raise ValidationError("max_threshold must not be below min_threshold")
    if not await db.get(Site, site_id):
        raise NotFoundError("Site", site_id)
    if not await db.get(PackagingType, packaging_type_id):
        raise NotFoundError("Packaging type", packaging_type_id)

    threshold = (
        await db.execute(
            select(SitePackagingThreshold).where(
                SitePackagingThreshold.site_id == site_id,
                SitePackagingThreshold.packaging_type_id == packaging_type_id,
            )
        )
    ).scalar_one_or_none()
    if not threshold:
        threshold = SitePackagingThreshold(
            site_id=site_id, packaging_type_id=packaging_type_id
        )
        db.add(threshold)

    threshold.min_threshold = min_threshold
    threshold.max_threshold = max_threshold
    threshold.alert_enabled = alert_enabled
    await db.flush()
    return threshold
