"""
Chapter-scoped context assembly.

Five layers are built from the chapter's foreign-key references:

    L1  chapter body, outline, tail of the previous chapter
    L2  referenced characters, their mutual relationships, locations, arc
    L3  active foreshadowing hinted by or before this chapter, hooks left
        by the previous chapter
    L4  power system and social rules (always, when recorded)
    L5  caller-supplied items

The assembled list is filtered by ``exclude`` and then cut down to the token
budget by :func:`storyloom.context.truncation.truncate`.
"""

from __future__ import annotations

from typing import Iterable, Optional, Union

from storyloom import schemas
from storyloom.context.base import BaseContextBuilder
from storyloom.context.models import BuiltContext, ContextItem, ContextItemType, priority_for
from storyloom.context.rendering import (
    render_arc,
    render_foreshadowing,
    render_hook,
    render_location,
    render_outline,
    render_power_system,
    render_relationship,
    render_social_rules,
)
from storyloom.errors import EntityNotFoundError
from storyloom.utils.logging_config import ChapterAdapter, get_logger

logger = get_logger(__name__)

PREV_TAIL_MARKER = "[End of previous chapter]"

AdditionalItem = Union[ContextItem, str]


class ChapterContextBuilder(BaseContextBuilder):

    def build(
        self,
        chapter_id: int,
        additional_items: Optional[Iterable[AdditionalItem]] = None,
        *,
        exclude: Iterable[ContextItemType | str] = (),
        budget: Optional[int] = None,
    ) -> BuiltContext:
        """Assemble the context for one chapter.

        Args:
            chapter_id: chapter to anchor on.
            additional_items: caller-supplied items (or plain strings, taken
                as ``custom``); always ranked lowest.
            exclude: item types to leave out before budgeting, e.g.
                ``chapter_content`` when the body is sent separately.
            budget: token ceiling; defaults to the configured context budget.

        Raises:
            EntityNotFoundError: if the chapter does not exist.
        """
        chapter = self.deps.chapters.find_chapter_with_content(chapter_id)
        if chapter is None:
            raise EntityNotFoundError("Chapter", chapter_id)

        log = ChapterAdapter(logger, chapter_id)
        prev = self._previous_chapter(chapter)

        layers = [
            ("L1", self._chapter_layer(chapter, prev)),
            ("L2", self._entity_layer(chapter, log)),
            ("L3", self._plot_layer(chapter, prev)),
            ("L4", self._world_layer()),
            ("L5", self._caller_layer(additional_items)),
        ]
        items: list[ContextItem] = []
        for name, layer in layers:
            log.debug("%s assembled", name, extra={"item_count": len(layer)})
            items.extend(layer)

        return self._finish(items, budget, exclude)

    # ------------------------------------------------------------------
    # Layers
    # ------------------------------------------------------------------

    def _chapter_layer(
        self, chapter: schemas.Chapter, prev: Optional[schemas.Chapter]
    ) -> list[ContextItem]:
        items = []
        if chapter.content and chapter.content.strip():
            items.append(ContextItem.of(
                ContextItemType.chapter_content, chapter.content, id=str(chapter.id)))

        outline = render_outline(chapter.outline)
        if outline:
            items.append(ContextItem.of(
                ContextItemType.chapter_outline, outline, id=str(chapter.id)))

        if prev is not None and prev.content and prev.content.strip():
            tail = prev.content[-self.settings.prev_chapter_tail_chars:]
            items.append(ContextItem.of(
                ContextItemType.chapter_prev_tail,
                f"{PREV_TAIL_MARKER}\n{tail}",
                id=f"prev-{prev.id}",
            ))
        return items

    def _entity_layer(self, chapter: schemas.Chapter, log: ChapterAdapter) -> list[ContextItem]:
        items = []

        character_ids = chapter.characters or []
        characters = self.deps.characters.find_by_ids(character_ids)
        _warn_missing(log, "character", character_ids, characters)
        for character in characters:
            items.append(ContextItem.of(
                ContextItemType.character, self.format_character(character), id=character.id))

        names = {c.id: c.name for c in characters}
        for rel in self.get_scoped_relationships([c.id for c in characters]):
            items.append(ContextItem.of(
                ContextItemType.relationship,
                render_relationship(rel, names[rel.source_id], names[rel.target_id]),
                id=f"rel-{rel.id}",
            ))

        location_ids = chapter.locations or []
        locations = self.deps.locations.find_by_ids(location_ids)
        _warn_missing(log, "location", location_ids, locations)
        for location in locations:
            items.append(ContextItem.of(
                ContextItemType.location, render_location(location), id=location.id))

        if chapter.arc_id:
            arc = self.deps.arcs.find_by_id(chapter.arc_id)
            if arc is None:
                _warn_missing(log, "arc", [chapter.arc_id], [])
            else:
                items.append(ContextItem.of(
                    ContextItemType.arc, render_arc(arc, chapter.id), id=arc.id))
        return items

    def _plot_layer(
        self, chapter: schemas.Chapter, prev: Optional[schemas.Chapter]
    ) -> list[ContextItem]:
        items = []

        linked = set(chapter.foreshadowing_hinted or []) | set(chapter.foreshadowing_planted or [])
        position = {c.id: i for i, c in enumerate(self.deps.chapters.find_all_chapters())}
        here = position.get(chapter.id)

        def reached(chapter_ref: Optional[int]) -> bool:
            return (
                here is not None
                and chapter_ref is not None
                and chapter_ref in position
                and position[chapter_ref] <= here
            )

        for fs in self.deps.foreshadowing.find_active():
            if (
                fs.id in linked
                or reached(fs.planted_chapter)
                or any(reached(h.chapter) for h in fs.hints or [])
            ):
                items.append(ContextItem.of(
                    ContextItemType.foreshadowing, render_foreshadowing(fs), id=fs.id))

        if prev is not None:
            for hook in self.deps.hooks.find_by_chapter(prev.id):
                items.append(ContextItem.of(ContextItemType.hook, render_hook(hook), id=hook.id))
        return items

    def _world_layer(self) -> list[ContextItem]:
        world = self.deps.world.get()
        if world is None:
            return []
        items = []
        power = render_power_system(world.power_system)
        if power:
            items.append(ContextItem.of(ContextItemType.power_system, power, id="power-system"))
        social = render_social_rules(world.social_rules)
        if social:
            items.append(ContextItem.of(ContextItemType.social_rules, social, id="social-rules"))
        return items

    def _caller_layer(self, additional_items: Optional[Iterable[AdditionalItem]]) -> list[ContextItem]:
        items = []
        for extra in additional_items or []:
            if isinstance(extra, str):
                extra = ContextItem.of(ContextItemType.custom, extra)
            if not extra.content.strip():
                continue
            items.append(extra.model_copy(
                update={"priority": priority_for(extra.type, caller_supplied=True)}))
        return items

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _previous_chapter(self, chapter: schemas.Chapter) -> Optional[schemas.Chapter]:
        """The chapter just before ``chapter`` in its volume (or the whole story), with body."""
        if chapter.volume_id is not None:
            siblings = self.deps.chapters.find_chapters_by_volume(chapter.volume_id)
        else:
            siblings = self.deps.chapters.find_all_chapters()
        ids = [c.id for c in siblings]
        idx = ids.index(chapter.id) if chapter.id in ids else -1
        if idx <= 0:
            return None
        return self.deps.chapters.find_chapter_with_content(ids[idx - 1])


def _warn_missing(log: ChapterAdapter, entity_type: str, wanted: Iterable[str], found: Iterable) -> None:
    missing = sorted(set(wanted) - {e.id for e in found})
    if missing:
        log.warning(
            "Chapter references unknown %s ids: %s", entity_type, ", ".join(missing),
            extra={"event_type": "dangling_reference", "metadata": {"entity_type": entity_type}},
        )
