"""Context preview REST endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from storyloom.context import ContextItem, ContextItemType
from storyloom.database import get_db
from storyloom.services.context_service import AssembledContext, ContextService

router = APIRouter()


class AdditionalItemRequest(BaseModel):
    type: ContextItemType = ContextItemType.custom
    id: Optional[str] = None
    content: str


class ChapterContextRequest(BaseModel):
    additional_items: List[AdditionalItemRequest] = Field(default_factory=list)
    exclude: List[ContextItemType] = Field(default_factory=list)
    budget: Optional[int] = Field(default=None, ge=0)


class ContextResponse(BaseModel):
    items: List[ContextItem]
    total_tokens: int
    truncated: bool
    formatted: str


def _response(assembled: AssembledContext) -> ContextResponse:
    built = assembled.context
    return ContextResponse(
        items=built.items,
        total_tokens=built.total_tokens,
        truncated=built.truncated,
        formatted=assembled.formatted,
    )


@router.get("/chapters/{chapter_id}/context", response_model=ContextResponse)
def preview_chapter_context(
    chapter_id: int,
    budget: Optional[int] = Query(default=None, ge=0),
    exclude: List[ContextItemType] = Query(default=[]),
    db: Session = Depends(get_db),
):
    """Context the model would receive when writing this chapter."""
    assembled = ContextService(db).for_chapter(chapter_id, exclude=exclude, budget=budget)
    return _response(assembled)


@router.post("/chapters/{chapter_id}/context", response_model=ContextResponse)
def build_chapter_context(
    chapter_id: int,
    request: ChapterContextRequest,
    db: Session = Depends(get_db),
):
    """Chapter context with caller-selected extra items."""
    extras = [ContextItem.of(item.type, item.content, id=item.id) for item in request.additional_items]
    assembled = ContextService(db).for_chapter(
        chapter_id, extras, exclude=request.exclude, budget=request.budget,
    )
    return _response(assembled)


@router.get("/context/story", response_model=ContextResponse)
def preview_story_context(
    mode: str = Query(default="full", pattern="^(full|summary)$"),
    budget: Optional[int] = Query(default=None, ge=0),
    db: Session = Depends(get_db),
):
    """Story-wide context, full dump or one-line summary."""
    return _response(ContextService(db).for_story(mode, budget))
