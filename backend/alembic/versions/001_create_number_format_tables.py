"""create orgs, number format, serial counter and list display tables

Revision ID: 001
Revises:
Create Date: 2026-10-17

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # =====================================================================
    # 1) orgs (owned by the org master; referenced here)
    # =====================================================================
    op.create_table(
        "orgs",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("gen_random_uuid()"),
            primary_key=True,
        ),
        sa.Column("org_code", sa.String(64), nullable=False, unique=True),
        sa.Column("org_name", sa.String(255), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
        ),
    )

    # =====================================================================
    # 2) customer_number_format_settings
    # =====================================================================
    op.create_table(
        "customer_number_format_settings",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("gen_random_uuid()"),
            primary_key=True,
        ),
        sa.Column("scope", sa.String(16), nullable=False),
        sa.Column(
            "org_id",
            sa.UUID(),
            sa.ForeignKey("orgs.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("target", sa.String(32), nullable=False),
        sa.Column(
            "enabled",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("true"),
        ),
        sa.Column("parts", postgresql.JSONB(), nullable=False),
        sa.Column("joiner", sa.String(64), nullable=True),
        sa.Column(
            "fiscal_year_start_month",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("4"),
        ),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.CheckConstraint("scope IN ('GLOBAL', 'ORG')", name="ck_cnf_scope"),
        sa.CheckConstraint(
            "target IN ('CUSTOMER_NO', 'MANAGEMENT_NO')", name="ck_cnf_target"
        ),
        sa.CheckConstraint(
            "fiscal_year_start_month BETWEEN 1 AND 12",
            name="ck_cnf_fiscal_year_start_month",
        ),
        sa.UniqueConstraint("scope", "org_id", "target", name="uq_cnf_scope_org_target"),
    )

    op.create_index(
        "ix_customer_number_format_settings_target",
        "customer_number_format_settings",
        ["target"],
    )
    op.create_index(
        "ix_customer_number_format_settings_org_id",
        "customer_number_format_settings",
        ["org_id"],
    )
    # NULL org_id rows are never equal under the unique constraint above
    op.create_index(
        "uq_cnf_global_target",
        "customer_number_format_settings",
        ["target"],
        unique=True,
        postgresql_where=sa.text("org_id IS NULL"),
    )

    # =====================================================================
    # 3) customer_serial_counters
    # =====================================================================
    op.create_table(
        "customer_serial_counters",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("gen_random_uuid()"),
            primary_key=True,
        ),
        sa.Column(
            "format_setting_id",
            sa.UUID(),
            sa.ForeignKey("customer_number_format_settings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("context_key", sa.String(255), nullable=False),
        sa.Column(
            "current_value",
            sa.BigInteger(),
            nullable=False,
            server_default=sa.text("0"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
        ),
        sa.UniqueConstraint(
            "format_setting_id", "context_key", name="uq_csc_format_context"
        ),
    )

    op.create_index(
        "ix_customer_serial_counters_context_key",
        "customer_serial_counters",
        ["context_key"],
    )

    # =====================================================================
    # 4) customer_list_display_settings
    # =====================================================================
    op.create_table(
        "customer_list_display_settings",
        sa.Column(
            "id",
            sa.UUID(),
            server_default=sa.text("gen_random_uuid()"),
            primary_key=True,
        ),
        sa.Column("scope", sa.String(16), nullable=False),
        sa.Column(
            "org_id",
            sa.UUID(),
            sa.ForeignKey("orgs.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column(
            "show_customer_no",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("true"),
        ),
        sa.Column(
            "show_management_no",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
        ),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.UniqueConstraint("scope", "org_id", name="uq_clds_scope_org"),
    )

    op.create_index(
        "ix_customer_list_display_settings_org_id",
        "customer_list_display_settings",
        ["org_id"],
    )
    op.create_index(
        "uq_clds_global",
        "customer_list_display_settings",
        ["scope"],
        unique=True,
        postgresql_where=sa.text("org_id IS NULL"),
    )


def downgrade() -> None:
    op.drop_table("customer_list_display_settings")
    op.drop_table("customer_serial_counters")
    op.drop_table("customer_number_format_settings")
    op.drop_table("orgs")
