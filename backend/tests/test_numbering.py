"""Load number generation tests."""

from datetime import date

import pytest

from app.utils.numbering import build_prefix, generate_load_number, next_load_number


@pytest.mark.unit
class TestNextLoadNumber:

    def test_prefix_format(self):
        assert build_prefix("BV1", date(2025, 6, 1)) == "BV1250601"

    def test_first_load_gets_bare_prefix(self):
        assert next_load_number("BV1250601", []) == "BV1250601"

    def test_second_load_gets_suffix_two(self):
        assert next_load_number("BV1250601", ["BV1250601"]) == "BV1250601-2"

    def test_suffix_is_numeric_not_lexicographic(self):
        existing = ["BV1250601"] + [f"BV1250601-{n}" for n in range(2, 11)]
        assert next_load_number("BV1250601", existing) == "BV1250601-11"

    def test_longer_site_code_is_ignored(self):
        # "BV12" on 2025-06-01 would never produce this, but a prefix match must be exact
        assert next_load_number("BV1250601", ["BV1250601X", "BV12506011"]) == "BV1250601"


@pytest.mark.integration
@pytest.mark.asyncio
class TestGenerateLoadNumber:

    async def test_reads_existing_numbers(self, db_session, seed):
        from app.models.load import Load

        db_session.add(Load(
            load_number="BV1250601",
            origin_site_id=seed.farm.id,
            destination_site_id=seed.depot.id,
            dispatch_date=date(2025, 6, 1),
        ))
        await db_session.flush()

        number = await generate_load_number(db_session, "BV1", date(2025, 6, 1))
        assert number == "BV1250601-2"
        assert await generate_load_number(db_session, "BV1", date(2025, 6, 2)) == "BV1250602"
