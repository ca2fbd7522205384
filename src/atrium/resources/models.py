"""Resource persistence model -- the generic hierarchical node.

Meeting and Space rows reuse the resource id as their own primary key
(class-table inheritance without a discriminator join). Hierarchy lives in
the materialized ``path`` column; there is no parent foreign key.

``version`` is the optimistic-concurrency counter: SQLAlchemy adds
``WHERE version = :old`` to every UPDATE and raises StaleDataError when the
row changed underneath.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.atrium.core.database import Base, utcnow
from src.atrium.workspaces.models import WorkspaceMemberModel, WorkspaceModel


class ResourceModel(Base):
    """Generic node shared by every Space and Meeting."""

    __tablename__ = "resources"
    __table_args__ = (
        UniqueConstraint("workspace_id", "path", name="uq_resources_workspace_path"),
        Index("ix_resources_workspace_type", "workspace_id", "type"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    workspace_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("workspace_members.id"),
        nullable=False,
        index=True,
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    visibility: Mapped[str] = mapped_column(
        String(20),
        default="public",
        server_default=text("'public'"),
    )
    path: Mapped[str] = mapped_column(String(1024), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("1"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    workspace: Mapped[WorkspaceModel] = relationship(lazy="raise")
    owner: Mapped[WorkspaceMemberModel] = relationship(lazy="raise")

    __mapper_args__ = {"version_id_col": version}
