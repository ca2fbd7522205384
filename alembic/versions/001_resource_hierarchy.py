"""Create workspace, resource, meeting and space tables.

Revision ID: 001_resource_hierarchy
Revises:
Create Date: 2026-10-19

- workspaces / workspace_members: tenant boundary and ownership identity
- resources: generic hierarchical node; path unique per workspace
- meetings / spaces: 1:1 specializations keyed by the resource id

The path column is plain text with a text_pattern_ops index so the
prefix (LIKE 'a.b.%') hierarchy queries can use an index under any
collation. Labels stay ltree-compatible.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_resource_hierarchy"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    # ── workspaces ───────────────────────────────────────────────────────

    op.create_table(
        "workspaces",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "workspace_members",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "workspace_id",
            sa.Uuid(),
            sa.ForeignKey("workspaces.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), server_default=sa.text("''"), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        *_timestamps(),
    )
    op.create_index(
        "ix_workspace_members_workspace_id", "workspace_members", ["workspace_id"]
    )

    # ── resources ────────────────────────────────────────────────────────

    op.create_table(
        "resources",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "workspace_id",
            sa.Uuid(),
            sa.ForeignKey("workspaces.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "owner_id",
            sa.Uuid(),
            sa.ForeignKey("workspace_members.id"),
            nullable=False,
        ),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column(
            "visibility",
            sa.String(20),
            server_default=sa.text("'public'"),
            nullable=False,
        ),
        sa.Column("path", sa.String(1024), nullable=False),
        sa.Column("version", sa.Integer(), server_default=sa.text("1"), nullable=False),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("workspace_id", "path", name="uq_resources_workspace_path"),
        sa.CheckConstraint("type IN ('space', 'meeting')", name="ck_resources_type"),
        sa.CheckConstraint(
            "visibility IN ('public', 'private')", name="ck_resources_visibility"
        ),
    )
    op.create_index("ix_resources_workspace_id", "resources", ["workspace_id"])
    op.create_index("ix_resources_owner_id", "resources", ["owner_id"])
    op.create_index("ix_resources_workspace_type", "resources", ["workspace_id", "type"])
    op.execute(
        "CREATE INDEX ix_resources_path_prefix "
        "ON resources (workspace_id, path text_pattern_ops)"
    )

    # ── meetings ─────────────────────────────────────────────────────────

    op.create_table(
        "meetings",
        sa.Column(
            "id",
            sa.Uuid(),
            sa.ForeignKey("resources.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "workspace_id",
            sa.Uuid(),
            sa.ForeignKey("workspaces.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.String(20),
            server_default=sa.text("'DRAFT'"),
            nullable=False,
        ),
        sa.Column("memo", sa.Text(), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column(
            "tags",
            sa.JSON(),
            server_default=sa.text("'[]'::json"),
            nullable=False,
        ),
        sa.Column("version", sa.Integer(), server_default=sa.text("1"), nullable=False),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_meetings_workspace_status", "meetings", ["workspace_id", "status"])

    # ── spaces ───────────────────────────────────────────────────────────

    op.create_table(
        "spaces",
        sa.Column(
            "id",
            sa.Uuid(),
            sa.ForeignKey("resources.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "workspace_id",
            sa.Uuid(),
            sa.ForeignKey("workspaces.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("version", sa.Integer(), server_default=sa.text("1"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_spaces_workspace_id", "spaces", ["workspace_id"])


def downgrade() -> None:
    op.drop_table("spaces")
    op.drop_table("meetings")
    op.execute("DROP INDEX IF EXISTS ix_resources_path_prefix")
    op.drop_table("resources")
    op.drop_table("workspace_members")
    op.drop_table("workspaces")
