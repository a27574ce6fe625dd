"""Priority-ordered budget enforcement for context items."""

from __future__ import annotations

from typing import Sequence

from storyloom.context.models import BuiltContext, ContextItem
from storyloom.errors import ValidationError
from storyloom.utils.logging_config import get_logger

logger = get_logger(__name__)


def truncate(items: Sequence[ContextItem], budget: int) -> BuiltContext:
    """Drop lowest-priority items until the estimated total fits ``budget``.

    Removal order is ``(priority, -construction_index)`` ascending: lowest
    priority first, and among equals the most recently constructed first.
    The last remaining item is never dropped, even if it alone exceeds the
    budget.  Survivors keep their construction order and content.

    Raises:
        ValidationError: if ``budget`` is negative.
    """
    if budget < 0:
        raise ValidationError(f"Token budget must be >= 0, got {budget}", field="budget")

    costs = [item.tokens for item in items]
    total = sum(costs)
    if total <= budget:
        return BuiltContext(items=list(items), truncated=False)

    queue = sorted(range(len(items)), key=lambda i: (items[i].priority, -i))
    removed: set[int] = set()
    for index in queue:
        if total <= budget or len(items) - len(removed) <= 1:
            break
        removed.add(index)
        total -= costs[index]

    kept = [item for i, item in enumerate(items) if i not in removed]
    logger.debug(
        "Dropped %d of %d context items to fit budget",
        len(removed), len(items),
        extra={
            "event_type": "context_truncation",
            "budget": budget,
            "tokens_used": total,
            "dropped": [f"{items[i].type.value}:{items[i].id}" for i in sorted(removed)],
        },
    )
    return BuiltContext(items=kept, truncated=bool(removed))
