"""ORM models.

Importing this package registers every table on Base.metadata (Alembic
and the test fixtures rely on that).
"""

# ── Reference data ───────────────────────────────────────────
from app.models.site import Site, PackagingType

# ── Loads ────────────────────────────────────────────────────
from app.models.load import Load, LoadPackaging, BackloadPackaging

# ── Inventory ledger ─────────────────────────────────────────
from app.models.inventory import SiteInventory, PackagingMovement, SitePackagingThreshold

# ── Alerts ───────────────────────────────────────────────────
from app.models.alert import Alert

__all__ = [
    "Site", "PackagingType",
    "Load", "LoadPackaging", "BackloadPackaging",
    "SiteInventory", "PackagingMovement", "SitePackagingThreshold",
    "Alert",
]
