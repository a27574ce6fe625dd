# Story Bible repositories (synchronous SQLAlchemy sessions)
from .base import BaseRepository
from .characters import CharacterRepository, RelationshipRepository
from .plot import ArcRepository, ForeshadowingRepository, HookRepository
from .world import FactionRepository, LocationRepository, WorldRepository
from .writing import ChapterRepository, VolumeRepository

__all__ = [
    "BaseRepository",
    "CharacterRepository",
    "RelationshipRepository",
    "ArcRepository",
    "ForeshadowingRepository",
    "HookRepository",
    "FactionRepository",
    "LocationRepository",
    "WorldRepository",
    "ChapterRepository",
    "VolumeRepository",
]
