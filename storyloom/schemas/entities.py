"""
Story Bible Entity Schemas

Read models returned by the repository layer.  They are built straight from
ORM rows (``from_attributes``), so JSON columns arrive as nested models and
callers never hold on to a live SQLAlchemy session.

Usage:
    from storyloom.schemas import Character

    character = Character.model_validate(orm_row)
    character.motivation.surface
"""
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from typing import Any, Optional, List, Dict


class EntityModel(BaseModel):
    """Base for all read models: ORM-compatible, tolerant of legacy JSON keys."""
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def _drop_null_entries(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [v for v in value if v is not None]
        return value


class JsonModel(EntityModel):
    """Base for models stored inside a JSON column.

    A ``null`` key reads as "not set" and falls back to the field default.
    """

    @model_validator(mode="before")
    @classmethod
    def _drop_null_keys(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


# ---------------------------------------------------------------------------
# Characters
# ---------------------------------------------------------------------------

class CharacterMotivation(JsonModel):
    """Three motivation layers, from stated goal down to unconscious need."""
    surface: str = Field(default="", description="Visible, stated goal")
    hidden: Optional[str] = Field(default=None, description="Hidden psychological driver")
    core: Optional[str] = Field(default=None, description="Unconscious core need")


class CharacterFacets(JsonModel):
    """Narrative facets of a personality."""
    public: str = Field(default="", description="Public persona")
    private: Optional[str] = None
    hidden: Optional[str] = None
    under_pressure: Optional[str] = None


class CharacterArc(JsonModel):
    type: str = Field(default="flat", description="positive | negative | flat | supporting")
    start_state: Optional[str] = None
    end_state: Optional[str] = None


class Character(EntityModel):
    id: str
    name: str
    role: str = "supporting"
    appearance: Optional[str] = None
    voice_samples: Optional[List[str]] = None
    motivation: Optional[CharacterMotivation] = None
    conflict_type: Optional[str] = None
    template: Optional[str] = None
    facets: Optional[CharacterFacets] = None
    arc: Optional[CharacterArc] = None
    faction_id: Optional[str] = None
    first_appearance: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Relationship(EntityModel):
    id: int
    source_id: str
    target_id: str
    type: str
    join_reason: Optional[str] = None
    independent_goal: Optional[str] = None
    disagree_scenarios: Optional[List[str]] = None
    leave_scenarios: Optional[List[str]] = None
    mc_needs: Optional[str] = None
    evolution: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ---------------------------------------------------------------------------
# World
# ---------------------------------------------------------------------------

class PowerSystem(JsonModel):
    name: str = ""
    levels: Optional[List[str]] = None
    core_rules: Optional[List[str]] = None
    constraints: Optional[List[str]] = None


class World(EntityModel):
    id: str = "main"
    power_system: Optional[PowerSystem] = None
    social_rules: Optional[Dict[str, Optional[str]]] = None


class Location(EntityModel):
    id: str
    name: str
    type: Optional[str] = None
    significance: Optional[str] = None
    atmosphere: Optional[str] = None
    details: Optional[dict] = None


class Faction(EntityModel):
    id: str
    name: str
    type: Optional[str] = None
    status: Optional[str] = None
    leader_id: Optional[str] = None
    stance_to_mc: Optional[str] = Field(default=None, description="friendly | neutral | hostile")
    goals: Optional[List[str]] = None
    resources: Optional[List[str]] = None
    internal_conflict: Optional[str] = None


# ---------------------------------------------------------------------------
# Plot
# ---------------------------------------------------------------------------

class ArcSection(JsonModel):
    name: str = ""
    chapters: List[int] = Field(default_factory=list)
    type: Optional[str] = None
    status: str = "planned"


class Arc(EntityModel):
    id: str
    name: str
    type: str = "main"
    chapter_start: Optional[int] = None
    chapter_end: Optional[int] = None
    status: str = "planned"
    progress: int = 0
    sections: Optional[List[ArcSection]] = None
    main_arc_relation: Optional[str] = None


class ForeshadowingHint(JsonModel):
    chapter: Optional[int] = None
    text: str = ""


class Foreshadowing(EntityModel):
    id: str
    content: str
    planted_chapter: Optional[int] = None
    planted_text: Optional[str] = None
    hints: Optional[List[ForeshadowingHint]] = None
    planned_payoff: Optional[int] = None
    resolved_chapter: Optional[int] = None
    status: str = "active"
    term: Optional[str] = None


class Hook(EntityModel):
    id: str
    type: str = "chapter"
    chapter_id: Optional[int] = None
    content: str
    hook_type: Optional[str] = None
    strength: Optional[int] = Field(default=None, description="0-100")


# ---------------------------------------------------------------------------
# Volumes & chapters
# ---------------------------------------------------------------------------

class Volume(EntityModel):
    id: int
    name: Optional[str] = None
    theme: Optional[str] = None
    status: str = "planned"


class ChapterOutline(JsonModel):
    goal: Optional[str] = None
    scenes: Optional[List[str]] = None
    hook_ending: Optional[str] = None


class Chapter(EntityModel):
    """A chapter row.  ``content`` is None when loaded without the body."""
    id: int
    volume_id: Optional[int] = None
    arc_id: Optional[str] = None
    title: Optional[str] = None
    status: str = "outline"
    sort_order: int = 0
    outline: Optional[ChapterOutline] = None
    content: Optional[str] = None
    word_count: int = 0
    characters: Optional[List[str]] = None
    locations: Optional[List[str]] = None
    foreshadowing_planted: Optional[List[str]] = None
    foreshadowing_hinted: Optional[List[str]] = None
    foreshadowing_resolved: Optional[List[str]] = None
    emotion_curve: Optional[str] = None
    tension: Optional[str] = None
