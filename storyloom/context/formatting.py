"""Serialize kept context items into one prompt-ready text block."""

from __future__ import annotations

from typing import Iterable, Sequence

from storyloom.context.models import LABELS, ContextItem, ContextItemType

CONTEXT_OPEN = "<context>"
CONTEXT_CLOSE = "</context>"


def format_context(
    items: Sequence[ContextItem],
    exclude: Iterable[ContextItemType | str] = (),
) -> str:
    """Group ``items`` by type in layer order under ``## <Label>`` headings.

    Items keep their construction order within a group.  Types listed in
    ``exclude`` are left out; nothing else is dropped or reordered by
    priority.
    """
    skipped = {ContextItemType(t) for t in exclude}
    sections = []
    for item_type in ContextItemType:
        if item_type in skipped:
            continue
        group = [item.content for item in items if item.type == item_type]
        if group:
            sections.append(f"## {LABELS[item_type]}\n" + "\n\n".join(group))
    return "\n".join([CONTEXT_OPEN, "\n\n".join(sections), CONTEXT_CLOSE])
