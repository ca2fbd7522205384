"""Meeting persistence model -- 1:1 specialization of a Resource.

The meeting row's primary key is the resource id. Meetings are never hard
deleted; ``deleted_at`` marks a soft delete and every read filters it out.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.atrium.core.database import Base, utcnow
from src.atrium.resources.models import ResourceModel


class MeetingModel(Base):
    """Meeting content and lifecycle status.

    status moves DRAFT -> IN_PROGRESS <-> PAUSED -> COMPLETED -> PUBLISHED;
    only the publish step is guarded. Tags are a JSON array so ordering is
    preserved.
    """

    __tablename__ = "meetings"
    __table_args__ = (
        Index("ix_meetings_workspace_status", "workspace_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("resources.id", ondelete="CASCADE"),
        primary_key=True,
    )
    workspace_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default="DRAFT",
        server_default=text("'DRAFT'"),
    )
    memo: Mapped[str | None] = mapped_column(Text, nullable=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[list] = mapped_column(JSON, default=list)
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

    resource: Mapped[ResourceModel] = relationship(lazy="joined", innerjoin=True)

    __mapper_args__ = {"version_id_col": version}
