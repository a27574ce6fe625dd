# Context assembly engine
from .base import BaseContextBuilder, ContextBuilderDeps
from .chapter import ChapterContextBuilder
from .formatting import format_context
from .models import (
    BuiltContext,
    ContextItem,
    ContextItemType,
    L1_PRIORITY,
    L2_PRIORITY,
    L3_PRIORITY,
    L4_PRIORITY,
    L5_PRIORITY,
    priority_for,
)
from .story import GlobalContextBuilder
from .tokens import estimate_tokens
from .truncation import truncate

__all__ = [
    "BaseContextBuilder",
    "ContextBuilderDeps",
    "ChapterContextBuilder",
    "GlobalContextBuilder",
    "BuiltContext",
    "ContextItem",
    "ContextItemType",
    "L1_PRIORITY",
    "L2_PRIORITY",
    "L3_PRIORITY",
    "L4_PRIORITY",
    "L5_PRIORITY",
    "priority_for",
    "format_context",
    "estimate_tokens",
    "truncate",
]
