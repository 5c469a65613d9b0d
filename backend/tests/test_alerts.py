"""Threshold evaluation and alert bookkeeping tests."""

import pytest

from app.middleware.exceptions import NotFoundError, ValidationError
from app.services.alerts import (
    acknowledge_alert,
    evaluate_thresholds,
    list_alerts,
    set_threshold,
    stock_status,
)

from conftest import ACTOR_ID


@pytest.mark.unit
class TestStockStatus:

    @pytest.mark.parametrize(
        "quantity, expected",
        [(50, "critical"), (10, "critical"), (-3, "critical"), (51, "warning"), (60, "warning"), (61, "ok")],
    )
    def test_bands(self, quantity, expected):
        assert stock_status(quantity, 50, 1.2) == expected

    def test_zero_threshold_means_not_configured(self):
        assert stock_status(-100, 0, 1.2) == "ok"
        assert stock_status(5, None, 1.2) == "ok"


@pytest.mark.integration
@pytest.mark.asyncio
class TestEvaluateThresholds:

    async def test_critical_and_warning_alerts(self, db_session, seed):
        # farm holds 500 crates; depot holds none
        await set_threshold(db_session, site_id=seed.farm.id, packaging_type_id=seed.crate.id, min_threshold=450)
        await set_threshold(db_session, site_id=seed.depot.id, packaging_type_id=seed.crate.id, min_threshold=10)

        alerts = await evaluate_thresholds(db_session, warning_ratio=1.2)

        by_site = {a.site_id: a for a in alerts}
        assert by_site[seed.farm.id].severity == "warning"
        assert by_site[seed.depot.id].severity == "critical"
        assert all(a.alert_type == "low_stock" for a in alerts)

    async def test_open_alert_not_repeated_until_acknowledged(self, db_session, seed):
        await set_threshold(db_session, site_id=seed.depot.id, packaging_type_id=seed.crate.id, min_threshold=10)

        first = await evaluate_thresholds(db_session, warning_ratio=1.2)
        assert len(first) == 1
        assert await evaluate_thresholds(db_session, warning_ratio=1.2) == []

        await acknowledge_alert(db_session, first[0].id, ACTOR_ID)
        again = await evaluate_thresholds(db_session, warning_ratio=1.2)
        assert len(again) == 1

    async def test_disabled_and_healthy_thresholds_are_quiet(self, db_session, seed):
        await set_threshold(
            db_session, site_id=seed.depot.id, packaging_type_id=seed.crate.id,
            min_threshold=10, alert_enabled=False,
        )
        await set_threshold(db_session, site_id=seed.farm.id, packaging_type_id=seed.crate.id, min_threshold=100)
        assert await evaluate_thresholds(db_session, warning_ratio=1.2) == []


@pytest.mark.integration
@pytest.mark.asyncio
class TestThresholdsAndAcknowledgement:

    async def test_set_threshold_upserts(self, db_session, seed):
        first = await set_threshold(db_session, site_id=seed.farm.id, packaging_type_id=seed.crate.id, min_threshold=10)
        second = await set_threshold(
            db_session, site_id=seed.farm.id, packaging_type_id=seed.crate.id,
            min_threshold=25, max_threshold=800,
        )
        assert first.id == second.id
        assert second.min_threshold == 25
        assert second.max_threshold == 800

    async def test_set_threshold_validation(self, db_session, seed):
        with pytest.raises(ValidationError):
            await set_threshold(
                db_session, site_id=seed.farm.id, packaging_type_id=seed.crate.id,
                min_threshold=50, max_threshold=10,
            )
        with pytest.raises(NotFoundError):
            await set_threshold(db_session, site_id="nowhere", packaging_type_id=seed.crate.id, min_threshold=5)

    async def test_acknowledge_is_idempotent(self, db_session, seed):
        await set_threshold(db_session, site_id=seed.depot.id, packaging_type_id=seed.crate.id, min_threshold=10)
        [alert] = await evaluate_thresholds(db_session, warning_ratio=1.2)

        acked = await acknowledge_alert(db_session, alert.id, ACTOR_ID)
        stamped_at = acked.acknowledged_at
        again = await acknowledge_alert(db_session, alert.id, "someone-else")

        assert again.is_acknowledged is True
        assert again.acknowledged_by == ACTOR_ID
        assert again.acknowledged_at == stamped_at

        items, total = await list_alerts(db_session, acknowledged=False)
        assert total == 0

    async def test_acknowledge_unknown_alert(self, db_session, seed):
        with pytest.raises(NotFoundError):
            await acknowledge_alert(db_session, "no-such-alert", ACTOR_ID)
