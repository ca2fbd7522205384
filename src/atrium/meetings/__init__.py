"""Meeting specialization -- content fields and the publish state machine."""

from src.atrium.meetings.schemas import (
    Meeting,
    MeetingCreate,
    MeetingPublish,
    MeetingStatus,
    MeetingUpdate,
)
from src.atrium.meetings.service import MeetingService

__all__ = [
    "Meeting",
    "MeetingCreate",
    "MeetingPublish",
    "MeetingService",
    "MeetingStatus",
    "MeetingUpdate",
]
