from datetime import datetime
from typing import List, Optional
from sqlalchemy import String, DateTime, ForeignKey, Text, JSON, Integer, UniqueConstraint, Index
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func

class Base(DeclarativeBase):
    pass

# ---------------------------------------------------------------------------
# Characters & relationships
# ---------------------------------------------------------------------------

class Character(Base):
    __tablename__ = "characters"

    id: Mapped[str] = mapped_column(String, primary_key=True)  # C001, C002, ...
    name: Mapped[str] = mapped_column(String, index=True)
    role: Mapped[str] = mapped_column(String, default="supporting", index=True)  # main | supporting | antagonist | mentioned

    # External
    appearance: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    voice_samples: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    # Internal
    motivation: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)  # {surface, hidden, core}
    conflict_type: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    template: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    facets: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)  # {public, private, hidden, under_pressure}

    # Character arc: {type, start_state, end_state}
    arc: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    faction_id: Mapped[Optional[str]] = mapped_column(ForeignKey("factions.id", ondelete="SET NULL"), nullable=True, index=True)
    first_appearance: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Relationship(Base):
    __tablename__ = "relationships"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    source_id: Mapped[str] = mapped_column(ForeignKey("characters.id", ondelete="CASCADE"), index=True)
    target_id: Mapped[str] = mapped_column(ForeignKey("characters.id", ondelete="CASCADE"), index=True)
    type: Mapped[str] = mapped_column(String)  # companion | rival | enemy | mentor | confidant | lover

    join_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    independent_goal: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    disagree_scenarios: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    leave_scenarios: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    mc_needs: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    evolution: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("source_id", "target_id", name="uix_relationship_pair"),
    )

# ---------------------------------------------------------------------------
# World
# ---------------------------------------------------------------------------

class World(Base):
    """Singleton row (id='main') holding the story-wide rules."""
    __tablename__ = "world"

    id: Mapped[str] = mapped_column(String, primary_key=True, default="main")
    power_system: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)  # {name, levels, core_rules, constraints}
    social_rules: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)  # {rule_name: description}

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Location(Base):
    __tablename__ = "locations"

    id: Mapped[str] = mapped_column(String, primary_key=True)  # L001, L002, ...
    name: Mapped[str] = mapped_column(String)
    type: Mapped[Optional[str]] = mapped_column(String, nullable=True, index=True)
    significance: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    atmosphere: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    details: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Faction(Base):
    __tablename__ = "factions"

    id: Mapped[str] = mapped_column(String, primary_key=True)  # F001, F002, ...
    name: Mapped[str] = mapped_column(String)
    type: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    status: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    # No FK constraint: characters.faction_id already points the other way
    leader_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    stance_to_mc: Mapped[Optional[str]] = mapped_column(String, nullable=True)  # friendly | neutral | hostile
    goals: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    resources: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    internal_conflict: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

# ---------------------------------------------------------------------------
# Plot
# ---------------------------------------------------------------------------

class Arc(Base):
    __tablename__ = "arcs"

    id: Mapped[str] = mapped_column(String, primary_key=True)  # ARC001, ARC002, ...
    name: Mapped[str] = mapped_column(String)
    type: Mapped[str] = mapped_column(String, default="main")  # main | sub
    chapter_start: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    chapter_end: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(String, default="planned", index=True)  # planned | in_progress | complete
    progress: Mapped[int] = mapped_column(Integer, default=0)  # 0-100
    sections: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)  # [{name, chapters, type, status}]
    main_arc_relation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Foreshadowing(Base):
    __tablename__ = "foreshadowing"

    id: Mapped[str] = mapped_column(String, primary_key=True)  # FS001, FS002, ...
    content: Mapped[str] = mapped_column(Text)
    planted_chapter: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    planted_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    hints: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)  # [{chapter, text}]
    planned_payoff: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    resolved_chapter: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(String, default="active", index=True)  # active | resolved | abandoned
    term: Mapped[Optional[str]] = mapped_column(String, nullable=True)  # short | mid | long

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Hook(Base):
    __tablename__ = "hooks"

    id: Mapped[str] = mapped_column(String, primary_key=True)  # H001, H002, ...
    type: Mapped[str] = mapped_column(String, default="chapter")  # opening | arc | chapter
    chapter_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    content: Mapped[str] = mapped_column(Text)
    hook_type: Mapped[Optional[str]] = mapped_column(String, nullable=True)  # suspense | anticipation | emotion | mystery
    strength: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # 0-100

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

# ---------------------------------------------------------------------------
# Volumes & chapters
# ---------------------------------------------------------------------------

class Volume(Base):
    __tablename__ = "volumes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    theme: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String, default="planned")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Chapter(Base):
    __tablename__ = "chapters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    volume_id: Mapped[Optional[int]] = mapped_column(ForeignKey("volumes.id", ondelete="SET NULL"), nullable=True, index=True)
    arc_id: Mapped[Optional[str]] = mapped_column(ForeignKey("arcs.id", ondelete="SET NULL"), nullable=True, index=True)

    title: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(String, default="outline")  # outline | draft | revision | done
    sort_order: Mapped[int] = mapped_column(Integer, default=0)

    outline: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)  # {goal, scenes, hook_ending}
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    word_count: Mapped[int] = mapped_column(Integer, default=0)

    # FK lists into characters / locations / foreshadowing
    characters: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    locations: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    foreshadowing_planted: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    foreshadowing_hinted: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    foreshadowing_resolved: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)

    emotion_curve: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    tension: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_chapters_volume_sort", "volume_id", "sort_order"),
    )
