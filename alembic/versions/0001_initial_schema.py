"""Initial schema with users, roles, menus and their junction tables.

This migration adds:
- sys_user, sys_role, sys_menu tables
- sys_user_roles and sys_role_menus junction tables
- the root role row and a trigger refusing to delete it

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ROOT_ROLE_ID = "00000000-0000-0000-0000-000000000001"


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "sys_user",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("nickname", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=True, unique=True),
        sa.Column("status", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
    )
    op.create_index("ix_sys_user_username", "sys_user", ["username"], unique=True)

    op.create_table(
        "sys_role",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(50), nullable=False, unique=True),
        sa.Column("value", sa.String(255), nullable=False, unique=True),
        sa.Column("remark", sa.String(255), nullable=True),
        sa.Column("status", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
    )

    op.create_table(
        "sys_menu",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("parent_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("path", sa.String(255), nullable=True),
        sa.Column("permission", sa.String(255), nullable=True),
        sa.Column("type", sa.Integer(), nullable=False, server_default="0", comment="0 group, 1 menu, 2 permission"),
        sa.Column("order_no", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
    )
    op.create_index("ix_sys_menu_parent_id", "sys_menu", ["parent_id"])

    op.create_table(
        "sys_user_roles",
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("sys_user.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "role_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("sys_role.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    op.create_table(
        "sys_role_menus",
        sa.Column(
            "role_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("sys_role.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "menu_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("sys_menu.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    op.execute(
        f"INSERT INTO sys_role (id, name, value, remark, status) "
        f"VALUES ('{ROOT_ROLE_ID}', 'Administrator', 'admin', 'Built-in root role', 1)"
    )

    # The root role survives any delete path, including raw SQL
    op.execute(
        f"""
        CREATE FUNCTION protect_root_role() RETURNS trigger AS $$
        BEGIN
            IF OLD.id = '{ROOT_ROLE_ID}'::uuid THEN
                RAISE EXCEPTION 'root role cannot be deleted';
            END IF;
            RETURN OLD;
        END;
        $$ LANGUAGE plpgsql;
        """
    )
    op.execute(
        "CREATE TRIGGER sys_role_protect_root BEFORE DELETE ON sys_role "
        "FOR EACH ROW EXECUTE FUNCTION protect_root_role();"
    )


def downgrade() -> None:
    op.execute("DROP TRIGGER IF EXISTS sys_role_protect_root ON sys_role;")
    op.execute("DROP FUNCTION IF EXISTS protect_root_role();")
    op.drop_table("sys_role_menus")
    op.drop_table("sys_user_roles")
    op.drop_index("ix_sys_menu_parent_id", table_name="sys_menu")
    op.drop_table("sys_menu")
    op.drop_table("sys_role")
    op.drop_index("ix_sys_user_username", table_name="sys_user")
    op.drop_table("sys_user")
