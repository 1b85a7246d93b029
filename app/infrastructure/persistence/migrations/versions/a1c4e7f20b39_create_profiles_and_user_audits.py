"""Create profiles and user_audits tables

Revision ID: a1c4e7f20b39
Revises:
Create Date: 2026-10-19 09:12:41.508117

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "a1c4e7f20b39"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create profiles and the append-only user_audits log."""
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("image", sa.String(), nullable=True),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("contact_name", sa.String(), nullable=True),
        sa.Column("contact_number", sa.String(), nullable=True),
        sa.Column("company_name", sa.String(), nullable=True),
        sa.Column("website", sa.String(), nullable=True),
        sa.Column("street1", sa.String(), nullable=True),
        sa.Column("street2", sa.String(), nullable=True),
        sa.Column("city", sa.String(), nullable=True),
        sa.Column("state", sa.String(), nullable=True),
        sa.Column("zip", sa.String(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_by", sa.String(), nullable=True),
        sa.Column("deletion_reason", sa.String(), nullable=True),
        sa.CheckConstraint(
            "type IN ('VENDOR', 'CLIENT', 'DRIVER', 'ADMIN', 'HELPDESK', 'SUPER_ADMIN')",
            name="user_type",
        ),
        sa.CheckConstraint(
            "status IN ('ACTIVE', 'PENDING', 'DELETED')", name="user_status"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index(
        op.f("ix_profiles_deleted_at"), "profiles", ["deleted_at"], unique=False
    )

    op.create_table(
        "user_audits",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column(
            "seq",
            sa.BigInteger(),
            sa.Identity(always=True),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("changes", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("performed_by", sa.String(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("metadata", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("seq"),
    )
    op.create_index(
        op.f("ix_user_audits_user_id"), "user_audits", ["user_id"], unique=False
    )
    op.create_index(
        op.f("ix_user_audits_performed_by"),
        "user_audits",
        ["performed_by"],
        unique=False,
    )
    op.create_index(
        "ix_user_audits_user_created",
        "user_audits",
        ["user_id", "created_at"],
        unique=False,
    )
    op.create_index(
        "ix_user_audits_user_action",
        "user_audits",
        ["user_id", "action"],
        unique=False,
    )

    # Append-only at the database level as well as in the ORM.
    op.execute(
        """
        CREATE OR REPLACE FUNCTION user_audits_immutable() RETURNS trigger AS $$
        BEGIN
            RAISE EXCEPTION 'user_audits rows are append-only';
        END;
        $$ LANGUAGE plpgsql;
        """
    )
    op.execute(
        """
        CREATE TRIGGER user_audits_no_update_delete
        BEFORE UPDATE OR DELETE ON user_audits
        FOR EACH ROW EXECUTE FUNCTION user_audits_immutable();
        """
    )


def downgrade() -> None:
    """Drop user_audits and profiles."""
    op.execute("DROP TRIGGER IF EXISTS user_audits_no_update_delete ON user_audits")
    op.execute("DROP FUNCTION IF EXISTS user_audits_immutable()")
    op.drop_index("ix_user_audits_user_action", table_name="user_audits")
    op.drop_index("ix_user_audits_user_created", table_name="user_audits")
    op.drop_index(op.f("ix_user_audits_performed_by"), table_name="user_audits")
    op.drop_index(op.f("ix_user_audits_user_id"), table_name="user_audits")
    op.drop_table("user_audits")
    op.drop_index(op.f("ix_profiles_deleted_at"), table_name="profiles")
    op.drop_table("profiles")
