"""add print_job_material table for multi-material jobs

Revision ID: 20260124_add_print_job_material
Revises: 20260110_initial_schema
Create Date: 2026-01-24
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20260124_add_print_job_material"
down_revision = "20260110_initial_schema"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "print_job_material",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "print_job_id",
            sa.Integer(),
            sa.ForeignKey("print_job.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("filament_id", sa.Integer(), sa.ForeignKey("filament.id"), nullable=False),
        sa.Column("weight_per_unit", sa.Float(), nullable=False, server_default="0"),
    )
    op.create_index("ix_print_job_material_print_job_id", "print_job_material", ["print_job_id"])


def downgrade() -> None:
    op.drop_index("ix_print_job_material_print_job_id", table_name="print_job_material")
    op.drop_table("print_job_material")
