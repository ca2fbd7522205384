"""Space specialization -- container nodes with a free-text description."""

from src.atrium.spaces.schemas import Space, SpaceCreate, SpaceUpdate
from src.atrium.spaces.service import SpaceService

__all__ = ["Space", "SpaceCreate", "SpaceService", "SpaceUpdate"]
