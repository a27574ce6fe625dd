"""
Entity → text renderers shared by the chapter and story-wide builders.

Every renderer follows the same "render or omit" rule: a sub-field that is
missing, blank or an empty list produces no line at all.  Renderers never
raise on partial records.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from storyloom import schemas

LIST_SEPARATOR = "; "
INDENT = "  "


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, dict)):
        return len(value) > 0
    return True


def _as_text(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return LIST_SEPARATOR.join(str(v) for v in value if _present(v))
    return str(value).strip()


def field_lines(fields: Iterable[tuple[str, Any]], indent: str = "") -> list[str]:
    """One ``Label: value`` line per present field; absent fields are skipped."""
    return [f"{indent}{label}: {_as_text(value)}" for label, value in fields if _present(value)]


def render_or_omit(
    header: Optional[str],
    fields: Iterable[tuple[str, Any]],
    indent: str = "",
) -> str:
    """Render ``header`` followed by the lines of :func:`field_lines`.

    List values are joined with :data:`LIST_SEPARATOR`.  Returns an empty
    string when there is neither a header nor any present field.
    """
    lines = [header] if header else []
    return "\n".join(lines + field_lines(fields, indent))


def render_block(label: str, lines: Iterable[str]) -> Optional[str]:
    """``Label:`` followed by indented lines, or None when there are no lines."""
    body = [f"{INDENT}{line}" for line in lines if _present(line)]
    if not body:
        return None
    return "\n".join([f"{label}:"] + body)


def _join(*parts: Optional[str]) -> str:
    return "\n".join(p for p in parts if p)


# ---------------------------------------------------------------------------
# Characters & relationships
# ---------------------------------------------------------------------------

def render_character(character: schemas.Character, full: bool = False) -> str:
    """Character profile: identity, motivation layers, facets, voice samples.

    ``full`` adds the conflict type, template and character arc.
    """
    header = render_or_omit(
        f"### {character.name} ({character.role})",
        [("Appearance", character.appearance)],
    )

    motivation = None
    if character.motivation is not None:
        m = character.motivation
        motivation = render_block("Motivation", field_lines([
            ("Surface", m.surface),
            ("Hidden", m.hidden),
            ("Core", m.core),
        ]))

    personality = None
    if character.facets is not None:
        f = character.facets
        personality = render_block("Personality", field_lines([
            ("Public", f.public),
            ("Private", f.private),
            ("Hidden", f.hidden),
            ("Under pressure", f.under_pressure),
        ]))

    voice = render_block(
        "Voice samples",
        [f'"{s}"' for s in character.voice_samples or [] if _present(s)],
    )

    extra = None
    if full:
        arc_text = None
        if character.arc is not None:
            arc = character.arc
            arc_text = arc.type
            if _present(arc.start_state) or _present(arc.end_state):
                arc_text += f" ({arc.start_state or '?'} → {arc.end_state or '?'})"
        extra = render_or_omit(None, [
            ("Conflict", character.conflict_type),
            ("Template", character.template),
            ("Arc", arc_text),
            ("First appearance", character.first_appearance),
        ])

    return _join(header, motivation, personality, voice, extra)


def render_relationship(
    relationship: schemas.Relationship,
    source_name: str,
    target_name: str,
    full: bool = False,
) -> str:
    """One directed relationship, both sides named."""
    fields: list[tuple[str, Any]] = [
        ("Bond", relationship.join_reason),
        ("Independent goal", relationship.independent_goal),
    ]
    if full:
        fields += [
            ("Would disagree when", relationship.disagree_scenarios),
            ("Would leave when", relationship.leave_scenarios),
            ("Protagonist needs", relationship.mc_needs),
            ("Evolution", relationship.evolution),
        ]
    return render_or_omit(
        f"{source_name} → {target_name}: {relationship.type}", fields, indent=INDENT,
    )


# ---------------------------------------------------------------------------
# Places & groups
# ---------------------------------------------------------------------------

def render_location(location: schemas.Location) -> str:
    return render_or_omit(f"### {location.name}", [
        ("Type", location.type),
        ("Atmosphere", location.atmosphere),
        ("Significance", location.significance),
    ])


def render_faction(faction: schemas.Faction, leader_name: Optional[str] = None) -> str:
    return render_or_omit(f"### {faction.name}", [
        ("Type", faction.type),
        ("Status", faction.status),
        ("Leader", leader_name),
        ("Stance toward protagonist", faction.stance_to_mc),
        ("Goals", faction.goals),
        ("Resources", faction.resources),
        ("Internal conflict", faction.internal_conflict),
    ])


# ---------------------------------------------------------------------------
# Plot
# ---------------------------------------------------------------------------

def current_section(arc: schemas.Arc, chapter_id: Optional[int] = None) -> Optional[schemas.ArcSection]:
    """The section covering ``chapter_id``, else the first one in progress."""
    sections = arc.sections or []
    if chapter_id is not None:
        for section in sections:
            if chapter_id in section.chapters:
                return section
    for section in sections:
        if section.status == "in_progress":
            return section
    return None


def render_arc(arc: schemas.Arc, chapter_id: Optional[int] = None) -> str:
    section = current_section(arc, chapter_id)
    span = None
    if arc.chapter_start is not None or arc.chapter_end is not None:
        start = "?" if arc.chapter_start is None else arc.chapter_start
        end = "?" if arc.chapter_end is None else arc.chapter_end
        span = f"{start}-{end}"
    summary = render_or_omit(f"### Arc: {arc.name}", [
        ("Type", arc.type),
        ("Status", arc.status),
        ("Progress", f"{arc.progress}%" if arc.progress else None),
        ("Chapters", span),
        ("Current section", section.name if section else None),
        ("Relation to main arc", arc.main_arc_relation),
    ])
    sections = render_block(
        "Sections",
        [f"- {s.name} ({s.status})" for s in arc.sections or [] if _present(s.name)],
    )
    return _join(summary, sections)


def _hint_text(hint: schemas.ForeshadowingHint) -> str:
    where = f"chapter {hint.chapter}" if hint.chapter is not None else None
    return ": ".join(p for p in (where, hint.text.strip()) if p)


def render_foreshadowing(foreshadowing: schemas.Foreshadowing, full: bool = False) -> str:
    """Foreshadowing thread; ``full`` adds planting, hints and payoff plans."""
    header = f"[{foreshadowing.id}] {foreshadowing.content}"
    fields: list[tuple[str, Any]] = [("Status", foreshadowing.status)]
    if full:
        planted = None
        if foreshadowing.planted_chapter is not None:
            planted = f"chapter {foreshadowing.planted_chapter}"
            if _present(foreshadowing.planted_text):
                planted += f": {foreshadowing.planted_text}"
        fields += [
            ("Term", foreshadowing.term),
            ("Planted", planted),
            ("Hints", [_hint_text(h) for h in foreshadowing.hints or []]),
            ("Planned payoff", f"chapter {foreshadowing.planned_payoff}"
                if foreshadowing.planned_payoff is not None else None),
            ("Resolved", f"chapter {foreshadowing.resolved_chapter}"
                if foreshadowing.resolved_chapter is not None else None),
        ]
    return render_or_omit(header, fields, indent=INDENT)


def render_hook(hook: schemas.Hook) -> str:
    return render_or_omit(f"[{hook.id}] {hook.content}", [
        ("Type", hook.hook_type),
        ("Strength", hook.strength),
    ], indent=INDENT)


def render_outline(outline: Optional[schemas.ChapterOutline]) -> str:
    if outline is None:
        return ""
    scenes = render_block(
        "Scenes",
        [f"{i}. {scene}" for i, scene in enumerate(
            [s for s in outline.scenes or [] if _present(s)], start=1)],
    )
    return _join(
        render_or_omit(None, [("Goal", outline.goal)]),
        scenes,
        render_or_omit(None, [("Hook ending", outline.hook_ending)]),
    )


# ---------------------------------------------------------------------------
# World
# ---------------------------------------------------------------------------

def render_power_system(power_system: Optional[schemas.PowerSystem]) -> str:
    if power_system is None:
        return ""
    ps = power_system
    if not any(_present(v) for v in (ps.name, ps.levels, ps.core_rules, ps.constraints)):
        return ""
    header = f"### Power System: {ps.name}" if _present(ps.name) else "### Power System"
    levels = " → ".join(ps.levels) if ps.levels else None
    return _join(
        render_or_omit(header, [("Levels", levels)]),
        render_block("Core rules", [f"- {r}" for r in ps.core_rules or []]),
        render_block("Constraints", [f"- {c}" for c in ps.constraints or []]),
    )


def render_social_rules(social_rules: Optional[dict[str, str]]) -> str:
    present = [(k, v) for k, v in (social_rules or {}).items() if _present(v)]
    if not present:
        return ""
    return "\n".join(["### Social Rules"] + [f"- {k}: {_as_text(v)}" for k, v in present])
