"""Load number generation.

Format:  {origin site code}{YY}{MM}{DD}[-N]

The first load from a site on a given dispatch date gets the bare prefix
(e.g. BV1250601); later ones get -2, -3, … one past the highest suffix
already taken.  The unique constraint on loads.load_number rejects the
loser if two creates race for the same number.
"""

import re
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.load import Load


def build_prefix(site_code: str, dispatch_date: date) -> str:
    return f"{site_code}{dispatch_date:%y%m%d}"


def next_load_number(prefix: str, existing: list[str]) -> str:
    """Pick the next free number for `prefix` given the numbers in use.

    Only exact matches count (`prefix` or `prefix-N`), so a longer site
    code that happens to start with the same characters is ignored.
    """
    pattern = re.compile(rf"^{re.escape(prefix)}(?:-(\d+))?$")
    highest = 0
    for number in existing:
        match = pattern.match(number)
        if not match:
            continue
        seq = int(match.group(1)) if match.group(1) else 1
        highest = max(highest, seq)

    if highest == 0:
        return prefix
    return f"{prefix}-{highest + 1}"


async def generate_load_number(
    db: AsyncSession,
    site_code: str,
    dispatch_date: date,
) -> str:
    """Generate the next load number for a site and dispatch date.

    Returns:
        e.g. "BV1250601", then "BV1250601-2"
    """
    prefix = build_prefix(site_code, dispatch_date)
    result = await db.execute(
        select(Load.load_number).where(Load.load_number.like(f"{prefix}%"))
    )
    existing = [row[0] for row in result.all()]
    return next_load_number(prefix, existing)
