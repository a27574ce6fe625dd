"""
Story-wide context assembly, for queries that are not anchored to a chapter.

Two fidelity modes over the same story bible:

- ``build_full``: one detailed item per character, relationship, location,
  faction, arc and foreshadowing thread, plus the world rules.
- ``build_summary``: three one-line roll-ups (characters as ``name(role)``,
  arcs as ``name(status)``, active foreshadowing content); world rules are
  left out.

Summary items only ever restate a subset of what the full items contain,
in fewer words, so a summary never costs more tokens than the full dump of
the same bible.
"""

from __future__ import annotations

from typing import Optional

from storyloom.context.base import BaseContextBuilder
from storyloom.context.models import BuiltContext, ContextItem, ContextItemType
from storyloom.context.rendering import (
    render_arc,
    render_character,
    render_faction,
    render_foreshadowing,
    render_location,
    render_power_system,
    render_relationship,
    render_social_rules,
)
from storyloom.utils.logging_config import get_logger

logger = get_logger(__name__)

SUMMARY_SEPARATOR = ", "
FORESHADOWING_SEPARATOR = "; "


class GlobalContextBuilder(BaseContextBuilder):
    """Builds context from every story-bible entity."""

    def build_full(self, budget: Optional[int] = None) -> BuiltContext:
        items: list[ContextItem] = []

        characters = self.deps.characters.find_all()
        names = {c.id: c.name for c in characters}
        for character in characters:
            items.append(ContextItem.of(
                ContextItemType.character, render_character(character, full=True), id=character.id))

        for rel in self.deps.relationships.find_all():
            if rel.source_id not in names or rel.target_id not in names:
                logger.warning(
                    "Skipping relationship %s with unknown character", rel.id,
                    extra={"event_type": "dangling_reference", "metadata": {"entity_type": "relationship"}},
                )
                continue
            items.append(ContextItem.of(
                ContextItemType.relationship,
                render_relationship(rel, names[rel.source_id], names[rel.target_id], full=True),
                id=f"rel-{rel.id}",
            ))

        for arc in self.deps.arcs.find_all():
            items.append(ContextItem.of(ContextItemType.arc, render_arc(arc), id=arc.id))

        for location in self.deps.locations.find_all():
            items.append(ContextItem.of(
                ContextItemType.location, render_location(location), id=location.id))

        for faction in self.deps.factions.find_all():
            leader = names.get(faction.leader_id) if faction.leader_id else None
            items.append(ContextItem.of(
                ContextItemType.faction, render_faction(faction, leader), id=faction.id))

        for fs in self.deps.foreshadowing.find_all():
            items.append(ContextItem.of(
                ContextItemType.foreshadowing, render_foreshadowing(fs, full=True), id=fs.id))

        world = self.deps.world.get()
        if world is not None:
            power = render_power_system(world.power_system)
            if power:
                items.append(ContextItem.of(ContextItemType.power_system, power, id="power-system"))
            social = render_social_rules(world.social_rules)
            if social:
                items.append(ContextItem.of(ContextItemType.social_rules, social, id="social-rules"))

        logger.debug("Full story context assembled", extra={"mode": "full", "item_count": len(items)})
        return self._finish(items, budget)

    def build_summary(self, budget: Optional[int] = None) -> BuiltContext:
        items: list[ContextItem] = []

        characters = self.deps.characters.find_all()
        if characters:
            listing = SUMMARY_SEPARATOR.join(f"{c.name}({c.role})" for c in characters)
            items.append(ContextItem.of(
                ContextItemType.character, f"Characters: {listing}", id="summary-characters"))

        arcs = self.deps.arcs.find_all()
        if arcs:
            listing = SUMMARY_SEPARATOR.join(f"{a.name}({a.status})" for a in arcs)
            items.append(ContextItem.of(
                ContextItemType.arc, f"Arcs: {listing}", id="summary-arcs"))

        active = self.deps.foreshadowing.find_active()
        if active:
            listing = FORESHADOWING_SEPARATOR.join(f.content for f in active)
            items.append(ContextItem.of(
                ContextItemType.foreshadowing,
                f"Active foreshadowing: {listing}",
                id="summary-foreshadowing",
            ))

        logger.debug("Summary story context assembled", extra={"mode": "summary", "item_count": len(items)})
        return self._finish(items, budget)
