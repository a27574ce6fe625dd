"""
Context orchestration: run a build, format it, report telemetry.

``ContextService`` is what prompt assembly talks to.  Every build is logged
as a ``context_built`` event with ``tokens_used`` / ``item_count`` /
``truncated``; lossy builds additionally emit a ``context_truncated``
warning so the caller can surface it.
"""

from __future__ import annotations

import dataclasses
import time
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from storyloom.config import Settings, get_settings
from storyloom.context import (
    BuiltContext,
    ChapterContextBuilder,
    ContextBuilderDeps,
    ContextItemType,
    GlobalContextBuilder,
    format_context,
)
from storyloom.context.chapter import AdditionalItem
from storyloom.errors import ValidationError
from storyloom.utils.logging_config import get_logger

logger = get_logger(__name__)

STORY_MODES = ("full", "summary")


@dataclasses.dataclass
class AssembledContext:
    """A built context plus its prompt-ready rendering."""
    context: BuiltContext
    formatted: str


class ContextService:
    """Builds chapter-scoped and story-wide context over one DB session."""

    def __init__(self, db: Session, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        deps = ContextBuilderDeps.from_session(db)
        self.chapter_builder = ChapterContextBuilder(deps, self.settings)
        self.global_builder = GlobalContextBuilder(deps, self.settings)

    def for_chapter(
        self,
        chapter_id: int,
        additional_items: Optional[Iterable[AdditionalItem]] = None,
        exclude: Iterable[ContextItemType | str] = (),
        budget: Optional[int] = None,
    ) -> AssembledContext:
        exclude = [ContextItemType(t) for t in exclude]
        started = time.monotonic()
        built = self.chapter_builder.build(
            chapter_id, additional_items, exclude=exclude, budget=budget,
        )
        self._report(built, started, budget, chapter_id=chapter_id, mode="chapter")
        return AssembledContext(context=built, formatted=format_context(built.items))

    def for_story(self, mode: str = "full", budget: Optional[int] = None) -> AssembledContext:
        if mode not in STORY_MODES:
            raise ValidationError(
                f"Unknown story context mode '{mode}' (expected one of {', '.join(STORY_MODES)})",
                field="mode",
            )
        started = time.monotonic()
        if mode == "full":
            built = self.global_builder.build_full(budget)
        else:
            built = self.global_builder.build_summary(budget)
        self._report(built, started, budget, mode=mode)
        return AssembledContext(context=built, formatted=format_context(built.items))

    def _report(
        self,
        built: BuiltContext,
        started: float,
        budget: Optional[int],
        chapter_id: Optional[int] = None,
        mode: Optional[str] = None,
    ) -> None:
        extra = {
            "chapter_id": chapter_id,
            "mode": mode,
            "budget": self.settings.context_budget if budget is None else budget,
            "tokens_used": built.total_tokens,
            "item_count": len(built.items),
            "truncated": built.truncated,
            "duration_ms": round((time.monotonic() - started) * 1000),
        }
        logger.info("Context built", extra={"event_type": "context_built", **extra})
        if built.truncated:
            logger.warning(
                "Context truncated to fit budget: %d tokens in %d items",
                built.total_tokens, len(built.items),
                extra={"event_type": "context_truncated", **extra},
            )
