"""Resource hierarchy -- the generic node behind every Space and Meeting.

Provides the materialized-path generator, the Resource model and schemas,
the session-bound ResourceRepository, and ResourceService.
"""

from src.atrium.resources.paths import LabelSequence, generate_path
from src.atrium.resources.schemas import (
    Resource,
    ResourceCreate,
    ResourceType,
    ResourceUpdate,
    ResourceVisibility,
)
from src.atrium.resources.service import ResourceService

__all__ = [
    "LabelSequence",
    "Resource",
    "ResourceCreate",
    "ResourceService",
    "ResourceType",
    "ResourceUpdate",
    "ResourceVisibility",
    "generate_path",
]
