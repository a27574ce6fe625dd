"""Shared plumbing for the chapter-scoped and story-wide context builders."""

from __future__ import annotations

import dataclasses
from typing import Iterable, Optional, Sequence

from sqlalchemy.orm import Session

from storyloom import schemas
from storyloom.config import Settings, get_settings
from storyloom.context.formatting import format_context
from storyloom.context.models import BuiltContext, ContextItem, ContextItemType
from storyloom.context.rendering import render_character
from storyloom.context.truncation import truncate
from storyloom.repositories import (
    ArcRepository,
    ChapterRepository,
    CharacterRepository,
    FactionRepository,
    ForeshadowingRepository,
    HookRepository,
    LocationRepository,
    RelationshipRepository,
    WorldRepository,
)


@dataclasses.dataclass
class ContextBuilderDeps:
    """Every repository a context build reads from."""
    chapters: ChapterRepository
    characters: CharacterRepository
    relationships: RelationshipRepository
    locations: LocationRepository
    factions: FactionRepository
    arcs: ArcRepository
    foreshadowing: ForeshadowingRepository
    hooks: HookRepository
    world: WorldRepository

    @classmethod
    def from_session(cls, db: Session) -> "ContextBuilderDeps":
        return cls(
            chapters=ChapterRepository(db),
            characters=CharacterRepository(db),
            relationships=RelationshipRepository(db),
            locations=LocationRepository(db),
            factions=FactionRepository(db),
            arcs=ArcRepository(db),
            foreshadowing=ForeshadowingRepository(db),
            hooks=HookRepository(db),
            world=WorldRepository(db),
        )


class BaseContextBuilder:
    """Formatting, character rendering, relationship scoping and budgeting."""

    def __init__(self, deps: ContextBuilderDeps, settings: Optional[Settings] = None):
        self.deps = deps
        self.settings = settings or get_settings()

    def format_context(
        self,
        items: Sequence[ContextItem],
        exclude: Iterable[ContextItemType | str] = (),
    ) -> str:
        return format_context(items, exclude)

    def format_character(self, character: schemas.Character) -> str:
        return render_character(character)

    def get_scoped_relationships(self, character_ids: Sequence[str]) -> list[schemas.Relationship]:
        """Relationships among ``character_ids`` only.

        Every pair is checked in both directions; each relationship appears
        once, in discovery order.
        """
        ids = list(dict.fromkeys(character_ids))
        found: list[schemas.Relationship] = []
        seen: set[int] = set()
        for i, a in enumerate(ids):
            for b in ids[i + 1:]:
                for source, target in ((a, b), (b, a)):
                    rel = self.deps.relationships.find_between(source, target)
                    if rel is not None and rel.id not in seen:
                        seen.add(rel.id)
                        found.append(rel)
        return found

    def _finish(
        self,
        items: list[ContextItem],
        budget: Optional[int],
        exclude: Iterable[ContextItemType | str] = (),
    ) -> BuiltContext:
        """Apply type exclusions, then the token budget."""
        skipped = {ContextItemType(t) for t in exclude}
        if skipped:
            items = [item for item in items if item.type not in skipped]
        return truncate(items, self.settings.context_budget if budget is None else budget)
