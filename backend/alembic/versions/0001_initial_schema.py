"""Initial schema: sites, packaging types, loads, inventory ledger, alerts.

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def upgrade() -> None:
    # ── Reference data ───────────────────────────────────────
    op.create_table(
        "sites",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("code", sa.String(50), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("site_type", sa.String(30), nullable=False, server_default="farm"),
        sa.Column("region", sa.String(100)),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_table(
        "packaging_types",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("code", sa.String(50), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("expected_turnaround_days", sa.Integer(), server_default="14"),
        sa.Column("is_returnable", sa.Boolean(), server_default=sa.true()),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )

    # ── Loads ────────────────────────────────────────────────
    op.create_table(
        "loads",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("load_number", sa.String(50), nullable=False, unique=True),
        sa.Column("origin_site_id", sa.String(36), sa.ForeignKey("sites.id"), nullable=False),
        sa.Column("destination_site_id", sa.String(36), sa.ForeignKey("sites.id"), nullable=False),
        sa.Column("channel_id", sa.String(36)),
        sa.Column("vehicle_id", sa.String(36)),
        sa.Column("driver_id", sa.String(36)),
        # Schedule
        sa.Column("dispatch_date", sa.Date(), nullable=False),
        sa.Column("expected_arrival_date", sa.Date()),
        sa.Column("scheduled_departure_time", sa.Time()),
        sa.Column("estimated_arrival_time", sa.Time()),
        sa.Column("actual_departure_time", sa.DateTime()),
        sa.Column("actual_arrival_time", sa.DateTime()),
        # Farm timing
        sa.Column("expected_farm_arrival_time", sa.Time()),
        sa.Column("expected_farm_departure_time", sa.Time()),
        sa.Column("actual_farm_arrival_time", sa.DateTime()),
        sa.Column("actual_farm_departure_time", sa.DateTime()),
        sa.Column("farm_arrival_overtime_minutes", sa.Integer(), server_default="0"),
        sa.Column("farm_departure_overtime_minutes", sa.Integer(), server_default="0"),
        sa.Column("has_overtime", sa.Boolean(), server_default=sa.false()),
        # Depot passthrough
        sa.Column("expected_depot_arrival_time", sa.Time()),
        sa.Column("expected_depot_departure_time", sa.Time()),
        sa.Column("actual_depot_arrival_time", sa.DateTime()),
        sa.Column("actual_depot_departure_time", sa.DateTime()),
        # Status
        sa.Column("status", sa.String(30), nullable=False, server_default="scheduled"),
        sa.Column("on_time_status", sa.String(20)),
        sa.Column("departure_status", sa.String(20)),
        sa.Column("has_discrepancy", sa.Boolean(), server_default=sa.false()),
        sa.Column("discrepancy_notes", sa.Text()),
        sa.Column("cancelled_reason", sa.Text()),
        sa.Column("notes", sa.Text()),
        # Backload
        sa.Column("backload_site_id", sa.String(36), sa.ForeignKey("sites.id")),
        sa.Column("backload_notes", sa.Text()),
        sa.Column("linked_load_id", sa.String(36), sa.ForeignKey("loads.id")),
        sa.Column("is_backload", sa.Boolean(), server_default=sa.false()),
        # Audit
        sa.Column("created_by", sa.String(36)),
        sa.Column("updated_by", sa.String(36)),
        sa.Column("confirmed_farm_arrival_by", sa.String(36)),
        sa.Column("confirmed_farm_arrival_at", sa.DateTime()),
        sa.Column("confirmed_farm_departure_by", sa.String(36)),
        sa.Column("confirmed_farm_departure_at", sa.DateTime()),
        sa.Column("confirmed_dispatch_by", sa.String(36)),
        sa.Column("confirmed_dispatch_at", sa.DateTime()),
        sa.Column("confirmed_receipt_by", sa.String(36)),
        sa.Column("confirmed_receipt_at", sa.DateTime()),
        sa.Column("cancelled_by", sa.String(36)),
        sa.Column("cancelled_at", sa.DateTime()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_loads_load_number", "loads", ["load_number"])
    op.create_index("ix_loads_origin_site_id", "loads", ["origin_site_id"])
    op.create_index("ix_loads_destination_site_id", "loads", ["destination_site_id"])
    op.create_index("ix_loads_dispatch_date", "loads", ["dispatch_date"])
    op.create_index("ix_loads_status", "loads", ["status"])
    op.create_index("ix_loads_has_overtime", "loads", ["has_overtime"])
    op.create_index("ix_loads_has_discrepancy", "loads", ["has_discrepancy"])

    op.create_table(
        "load_packaging",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "load_id", sa.String(36),
            sa.ForeignKey("loads.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("packaging_type_id", sa.String(36), sa.ForeignKey("packaging_types.id"), nullable=False),
        sa.Column("quantity_dispatched", sa.Integer(), nullable=False),
        sa.Column("quantity_received", sa.Integer()),
        sa.Column("quantity_damaged", sa.Integer(), server_default="0"),
        sa.Column("quantity_missing", sa.Integer(), server_default="0"),
        sa.Column("product_type_id", sa.String(36)),
        sa.Column("product_variety_id", sa.String(36)),
        sa.Column("product_grade_id", sa.String(36)),
        sa.Column("weight_kg", sa.Float()),
        sa.Column("notes", sa.Text()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_load_packaging_load_id", "load_packaging", ["load_id"])

    op.create_table(
        "backload_packaging",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "load_id", sa.String(36),
            sa.ForeignKey("loads.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("packaging_type_id", sa.String(36), sa.ForeignKey("packaging_types.id"), nullable=False),
        sa.Column("quantity_returned", sa.Integer(), server_default="0"),
        sa.Column("quantity_damaged", sa.Integer(), server_default="0"),
        sa.Column("notes", sa.Text()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_backload_packaging_load_id", "backload_packaging", ["load_id"])

    # ── Inventory ledger ─────────────────────────────────────
    op.create_table(
        "site_packaging_inventory",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("site_id", sa.String(36), sa.ForeignKey("sites.id"), nullable=False),
        sa.Column("packaging_type_id", sa.String(36), sa.ForeignKey("packaging_types.id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("quantity_damaged", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("handling_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_dispatched", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_received", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_returned", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_counted_at", sa.DateTime()),
        sa.Column("last_counted_by", sa.String(36)),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint("site_id", "packaging_type_id", name="uq_site_inventory_site_type"),
    )
    op.create_index("ix_site_packaging_inventory_site_id", "site_packaging_inventory", ["site_id"])

    op.create_table(
        "packaging_movements",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("movement_type", sa.String(30), nullable=False),
        sa.Column("site_id", sa.String(36), sa.ForeignKey("sites.id"), nullable=False),
        sa.Column("packaging_type_id", sa.String(36), sa.ForeignKey("packaging_types.id"), nullable=False),
        sa.Column("load_id", sa.String(36), sa.ForeignKey("loads.id")),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("quantity_damaged", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("direction", sa.String(10), nullable=False),
        sa.Column("reference_number", sa.String(100)),
        sa.Column("notes", sa.Text()),
        sa.Column("recorded_by", sa.String(36)),
        sa.Column("recorded_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_packaging_movements_movement_type", "packaging_movements", ["movement_type"])
    op.create_index("ix_packaging_movements_site_id", "packaging_movements", ["site_id"])
    op.create_index("ix_packaging_movements_load_id", "packaging_movements", ["load_id"])
    op.create_index("ix_packaging_movements_recorded_at", "packaging_movements", ["recorded_at"])

    op.create_table(
        "site_packaging_thresholds",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("site_id", sa.String(36), sa.ForeignKey("sites.id"), nullable=False),
        sa.Column("packaging_type_id", sa.String(36), sa.ForeignKey("packaging_types.id"), nullable=False),
        sa.Column("min_threshold", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("max_threshold", sa.Integer()),
        sa.Column("alert_enabled", sa.Boolean(), server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint("site_id", "packaging_type_id", name="uq_threshold_site_type"),
    )
    op.create_index("ix_site_packaging_thresholds_site_id", "site_packaging_thresholds", ["site_id"])

    # ── Alerts ───────────────────────────────────────────────
    op.create_table(
        "alerts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("alert_type", sa.String(50), nullable=False),
        sa.Column("severity", sa.String(20), nullable=False),
        sa.Column("site_id", sa.String(36), sa.ForeignKey("sites.id")),
        sa.Column("load_id", sa.String(36), sa.ForeignKey("loads.id")),
        sa.Column("packaging_type_id", sa.String(36), sa.ForeignKey("packaging_types.id")),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_acknowledged", sa.Boolean(), server_default=sa.false()),
        sa.Column("acknowledged_by", sa.String(36)),
        sa.Column("acknowledged_at", sa.DateTime()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_alerts_alert_type", "alerts", ["alert_type"])
    op.create_index("ix_alerts_severity", "alerts", ["severity"])
    op.create_index("ix_alerts_is_acknowledged", "alerts", ["is_acknowledged"])


def downgrade() -> None:
    op.drop_table("alerts")
    op.drop_table("site_packaging_thresholds")
    op.drop_table("packaging_movements")
    op.drop_table("site_packaging_inventory")
    op.drop_table("backload_packaging")
    op.drop_table("load_packaging")
    op.drop_table("loads")
    op.drop_table("packaging_types")
    op.drop_table("sites")
