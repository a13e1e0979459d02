"""Initial workshop schema.

- customers
- vehicles
- inventory_items
- service_items
- workers
- work_orders
- work_order_line_items
- work_order_assignments
- work_order_logs

Column types are kept portable so the same revision runs on PostgreSQL and SQLite.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c1d5e7a9b20"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

NOW = sa.text("CURRENT_TIMESTAMP")


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
    ]


def _money(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.Numeric(12, 2), nullable=nullable, server_default=None if nullable else "0")


def upgrade() -> None:
    # Customers and vehicles
    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("first_name", sa.Text(), nullable=False),
        sa.Column("last_name", sa.Text(), nullable=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("company", sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "vehicles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "customer_id",
            sa.Integer(),
            sa.ForeignKey("customers.id", name="fk_vehicles_customer_id_customers", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("vin", sa.Text(), nullable=False),
        sa.Column("make", sa.Text(), nullable=False),
        sa.Column("model", sa.Text(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("license_plate", sa.Text(), nullable=True),
        sa.Column("mileage", sa.Integer(), nullable=True),
        sa.Column("color", sa.Text(), nullable=True),
        *_timestamps(),
    )

    # Catalog
    op.create_table(
        "inventory_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("sku", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("quantity_on_hand", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("reorder_point", sa.Integer(), nullable=False, server_default="0"),
        _money("unit_cost"),
        _money("unit_price"),
        *_timestamps(),
        sa.UniqueConstraint("sku", name="uq_inventory_items_sku"),
    )
    op.create_index("ix_inventory_items_name", "inventory_items", ["name"])

    op.create_table(
        "service_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        _money("default_price"),
        *_timestamps(),
    )
    op.create_index("ix_service_items_name", "service_items", ["name"])

    # Workers
    op.create_table(
        "workers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("total_jobs", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_services", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_workers_name", "workers", ["name"])

    # Work orders
    op.create_table(
        "work_orders",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("code", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default="IN_PROGRESS"),
        sa.Column("is_historical", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "vehicle_id",
            sa.Integer(),
            sa.ForeignKey("vehicles.id", name="fk_work_orders_vehicle_id_vehicles", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "customer_id",
            sa.Integer(),
            sa.ForeignKey("customers.id", name="fk_work_orders_customer_id_customers", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("arrival_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("quoted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("scheduled_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_date", sa.DateTime(timezone=True), nullable=True),
        _money("labor_cost"),
        _money("parts_cost"),
        _money("taxes"),
        _money("discount"),
        _money("parking_charge"),
        _money("total_cost"),
        *_timestamps(),
        sa.UniqueConstraint("code", name="uq_work_orders_code"),
    )
    op.create_index("ix_work_orders_vehicle_id", "work_orders", ["vehicle_id"])
    op.create_index("ix_work_orders_customer_id", "work_orders", ["customer_id"])
    op.create_index("ix_work_orders_status", "work_orders", ["status"])

    op.create_table(
        "work_order_line_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "work_order_id",
            sa.Integer(),
            sa.ForeignKey("work_orders.id", name="fk_work_order_line_items_work_order_id_work_orders", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "inventory_item_id",
            sa.Integer(),
            sa.ForeignKey("inventory_items.id", name="fk_work_order_line_items_inventory_item_id_inventory_items", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "service_item_id",
            sa.Integer(),
            sa.ForeignKey("service_items.id", name="fk_work_order_line_items_service_item_id_service_items", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("line_total", sa.Numeric(12, 2), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_work_order_line_items_work_order_id", "work_order_line_items", ["work_order_id"])

    op.create_table(
        "work_order_assignments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "work_order_id",
            sa.Integer(),
            sa.ForeignKey("work_orders.id", name="fk_work_order_assignments_work_order_id_work_orders", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "worker_id",
            sa.Integer(),
            sa.ForeignKey("workers.id", name="fk_work_order_assignments_worker_id_workers", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("role", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("services_count", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_work_order_assignments_work_order_id", "work_order_assignments", ["work_order_id"])
    op.create_index("ix_work_order_assignments_worker_id", "work_order_assignments", ["worker_id"])

    op.create_table(
        "work_order_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "work_order_id",
            sa.Integer(),
            sa.ForeignKey("work_orders.id", name="fk_work_order_logs_work_order_id_work_orders", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("author", sa.Text(), nullable=True),
        sa.Column("category", sa.Text(), nullable=False, server_default="SYSTEM"),
        sa.Column("timestamp", sa.DateTime(timezone=True), server_default=NOW, nullable=False),
    )
    op.create_index("ix_work_order_logs_work_order_id", "work_order_logs", ["work_order_id"])


def downgrade() -> None:
    for table in [
        "work_order_logs",
        "work_order_assignments",
        "work_order_line_items",
        "work_orders",
        "workers",
        "service_items",
        "inventory_items",
        "vehicles",
        "customers",
    ]:
        op.drop_table(table)
