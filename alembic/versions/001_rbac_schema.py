"""RBAC schema - permission catalog, tenant roles, user roles, overrides.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

from garage_rbac.domain.catalog import build_seed_catalog

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    permission = op.create_table(
        "permission",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("key", sa.String(100), nullable=False),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("name_en", sa.String(255), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=True),
    )
    op.create_index("ix_permission_key", "permission", ["key"], unique=True)
    op.create_index("ix_permission_category", "permission", ["category", "display_order"])

    op.create_table(
        "role",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("tenant_id", sa.UUID(), nullable=False),
        sa.Column("key", sa.String(50), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_system_role", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_by", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_role_tenant_key", "role", ["tenant_id", "key"], unique=True)

    op.create_table(
        "role_permission",
        sa.Column("role_id", sa.UUID(), sa.ForeignKey("role.id", ondelete="CASCADE"), primary_key=True),
        sa.Column(
            "permission_id",
            sa.UUID(),
            sa.ForeignKey("permission.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("granted_by", sa.String(255), nullable=True),
    )

    op.create_table(
        "user_role",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("role_id", sa.UUID(), sa.ForeignKey("role.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("assigned_by", sa.String(255), nullable=True),
    )
    op.create_index("ix_user_role_user_role", "user_role", ["user_id", "role_id"], unique=True)
    op.create_index("ix_user_role_role", "user_role", ["role_id"])

    op.create_table(
        "permission_override",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column(
            "permission_id",
            sa.UUID(),
            sa.ForeignKey("permission.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("is_granted", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("granted_by", sa.String(255), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_permission_override_user_permission",
        "permission_override",
        ["user_id", "permission_id"],
        unique=True,
    )

    op.bulk_insert(
        permission,
        [
            {
                "id": p.id,
                "key": str(p.key),
                "category": str(p.category),
                "display_order": p.display_order,
                "is_active": True,
                "name_en": p.name_en,
                "description": p.description,
            }
            for p in build_seed_catalog()
        ],
    )


def downgrade() -> None:
    op.drop_table("permission_override")
    op.drop_table("user_role")
    op.drop_table("role_permission")
    op.drop_table("role")
    op.drop_table("permission")
