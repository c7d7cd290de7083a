"""initial schema: product, filament, print_job

Revision ID: 20260110_initial_schema
Revises:
Create Date: 2026-01-10
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20260110_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "product",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=True),
        sa.Column("weight", sa.Float(), nullable=False, server_default="0"),
        sa.Column("price", sa.Float(), nullable=True),
        sa.Column("stl_link", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "filament",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("color", sa.String(), nullable=True),
        sa.Column("total_weight", sa.Float(), nullable=False, server_default="0"),
        sa.Column("used_weight", sa.Float(), nullable=False, server_default="0"),
        sa.Column("cost_per_gram", sa.Float(), nullable=False, server_default="0"),
        sa.Column("purchase_price", sa.Float(), nullable=True),
        sa.Column("spool_weight", sa.Float(), nullable=True),
        sa.Column("spool_count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("status", sa.String(), nullable=False, server_default="Disponível"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "print_job",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("identifier", sa.String(), nullable=True),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("product.id"), nullable=False),
        sa.Column("filament_id", sa.Integer(), sa.ForeignKey("filament.id"), nullable=True),
        sa.Column("customer_name", sa.String(), nullable=True),
        sa.Column("customer_contact", sa.String(), nullable=True),
        sa.Column("customer_stage", sa.String(), nullable=False, server_default="NOVO_PEDIDO"),
        sa.Column("status", sa.String(), nullable=False, server_default="FILA"),
        sa.Column("total_quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("printed_quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("failed_quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("estimated_minutes", sa.Integer(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("started_at", sa.DateTime(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_print_job_identifier", "print_job", ["identifier"], unique=True)
    op.create_index("ix_print_job_status", "print_job", ["status"])
    op.create_index("ix_print_job_position", "print_job", ["position"])


def downgrade() -> None:
    op.drop_index("ix_print_job_position", table_name="print_job")
    op.drop_index("ix_print_job_status", table_name="print_job")
    op.drop_index("ix_print_job_identifier", table_name="print_job")
    op.drop_table("print_job")
    op.drop_table("filament")
    op.drop_table("product")
