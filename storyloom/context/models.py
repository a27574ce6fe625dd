"""
Context item types and the static layer / priority table.

Layers, highest priority first:

    L1  chapter-local      chapter body, outline, previous-chapter tail
    L2  entity profiles    characters, relationships, arcs, locations, factions
    L3  plot devices       foreshadowing, hooks from the previous chapter
    L4  world rules        power system, social rules
    L5  caller-supplied    free-text items

The enum declaration order is the layer order used when formatting.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from storyloom.context.tokens import estimate_tokens


class ContextItemType(str, Enum):
    """Closed set of context categories, in layer order."""
    chapter_content = "chapter_content"
    chapter_outline = "chapter_outline"
    chapter_prev_tail = "chapter_prev_tail"
    character = "character"
    relationship = "relationship"
    arc = "arc"
    location = "location"
    faction = "faction"
    foreshadowing = "foreshadowing"
    hook = "hook"
    power_system = "power_system"
    social_rules = "social_rules"
    custom = "custom"


L1_PRIORITY = 1000
L2_PRIORITY = 800
L3_PRIORITY = 600
L4_PRIORITY = 400
L5_PRIORITY = 200

# type -> (layer, intra-layer offset)
_LAYOUT: dict[ContextItemType, tuple[int, int]] = {
    ContextItemType.chapter_content: (1, 20),
    ContextItemType.chapter_outline: (1, 10),
    ContextItemType.chapter_prev_tail: (1, 0),
    ContextItemType.character: (2, 40),
    ContextItemType.relationship: (2, 30),
    ContextItemType.arc: (2, 20),
    ContextItemType.location: (2, 10),
    ContextItemType.faction: (2, 0),
    ContextItemType.foreshadowing: (3, 10),
    ContextItemType.hook: (3, 0),
    ContextItemType.power_system: (4, 10),
    ContextItemType.social_rules: (4, 0),
    ContextItemType.custom: (5, 0),
}

LAYER_BASE = {1: L1_PRIORITY, 2: L2_PRIORITY, 3: L3_PRIORITY, 4: L4_PRIORITY, 5: L5_PRIORITY}

LAYER: dict[ContextItemType, int] = {t: layer for t, (layer, _) in _LAYOUT.items()}
PRIORITY: dict[ContextItemType, int] = {
    t: LAYER_BASE[layer] + offset for t, (layer, offset) in _LAYOUT.items()
}

# Section headings used by the formatter
LABELS: dict[ContextItemType, str] = {
    ContextItemType.chapter_content: "Current Chapter",
    ContextItemType.chapter_outline: "Chapter Outline",
    ContextItemType.chapter_prev_tail: "Previous Chapter",
    ContextItemType.character: "Characters",
    ContextItemType.relationship: "Relationships",
    ContextItemType.arc: "Story Arcs",
    ContextItemType.location: "Locations",
    ContextItemType.faction: "Factions",
    ContextItemType.foreshadowing: "Foreshadowing",
    ContextItemType.hook: "Hooks",
    ContextItemType.power_system: "Power System",
    ContextItemType.social_rules: "Social Rules",
    ContextItemType.custom: "Additional Information",
}


def priority_for(item_type: ContextItemType, caller_supplied: bool = False) -> int:
    """Static priority of a category; caller-supplied items always sit in L5."""
    if caller_supplied:
        return L5_PRIORITY
    return PRIORITY[ContextItemType(item_type)]


class ContextItem(BaseModel):
    """One rendered unit of context."""
    model_config = ConfigDict(frozen=True)

    type: ContextItemType
    id: Optional[str] = Field(default=None, description="Source entity id; None for synthesized items")
    content: str
    priority: int

    @classmethod
    def of(cls, item_type: ContextItemType, content: str, id: Optional[str] = None) -> "ContextItem":
        """Build an item carrying its category's declared priority."""
        return cls(type=item_type, id=id, content=content, priority=priority_for(item_type))

    @property
    def tokens(self) -> int:
        return estimate_tokens(self.content)


class BuiltContext(BaseModel):
    """Result of a build: the kept items and whether anything was dropped."""
    model_config = ConfigDict(frozen=True)

    items: List[ContextItem] = Field(default_factory=list)
    truncated: bool = False

    @computed_field
    @property
    def total_tokens(self) -> int:
        return sum(item.tokens for item in self.items)
