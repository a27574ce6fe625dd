# Story Bible read models
from .entities import (
    EntityModel,
    # Characters
    Character,
    CharacterMotivation,
    CharacterFacets,
    CharacterArc,
    Relationship,
    # World
    World,
    PowerSystem,
    Location,
    Faction,
    # Plot
    Arc,
    ArcSection,
    Foreshadowing,
    ForeshadowingHint,
    Hook,
    # Writing
    Volume,
    Chapter,
    ChapterOutline,
)

__all__ = [
    "EntityModel",
    "Character",
    "CharacterMotivation",
    "CharacterFacets",
    "CharacterArc",
    "Relationship",
    "World",
    "PowerSystem",
    "Location",
    "Faction",
    "Arc",
    "ArcSection",
    "Foreshadowing",
    "ForeshadowingHint",
    "Hook",
    "Volume",
    "Chapter",
    "ChapterOutline",
]
