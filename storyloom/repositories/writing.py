"""Volumes and chapters.

Chapter reads come in two shapes: with the body text (``content``) and
without it, since most callers only need the outline and FK lists.
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import defer

from storyloom import models, schemas
from storyloom.utils.text import count_words
from storyloom.errors import EntityNotFoundError
from storyloom.repositories.base import BaseRepository


class VolumeRepository(BaseRepository[models.Volume, schemas.Volume]):
    model = models.Volume
    schema = schemas.Volume


class ChapterRepository(BaseRepository[models.Chapter, schemas.Chapter]):
    model = models.Chapter
    schema = schemas.Chapter

    def _story_order(self):
        """Chronological order: volume, then explicit sort order, then id."""
        return (
            func.coalesce(models.Chapter.volume_id, 0),
            models.Chapter.sort_order,
            models.Chapter.id,
        )

    def _without_body(self, row: models.Chapter) -> schemas.Chapter:
        # Never touches row.content, so a deferred body stays unloaded
        return self.schema.model_validate({
            attr.key: getattr(row, attr.key)
            for attr in models.Chapter.__mapper__.column_attrs
            if attr.key != "content"
        })

    def create(self, **values: Any) -> schemas.Chapter:
        """Create a chapter, deriving word count and appending to its volume's order."""
        content = values.get("content")
        values.setdefault("word_count", count_words(content))
        if "sort_order" not in values:
            volume_id = values.get("volume_id")
            same_volume = (
                models.Chapter.volume_id.is_(None) if volume_id is None
                else models.Chapter.volume_id == volume_id
            )
            current_max = self.db.execute(
                select(func.max(models.Chapter.sort_order)).where(same_volume)
            ).scalar_one_or_none()
            values["sort_order"] = (current_max or 0) + 1
        return super().create(**values)

    def find_chapter_by_id(self, chapter_id: int) -> Optional[schemas.Chapter]:
        """Chapter WITHOUT its body text."""
        row = self.db.get(models.Chapter, chapter_id, options=[defer(models.Chapter.content)])
        return self._without_body(row) if row is not None else None

    def find_chapter_with_content(self, chapter_id: int) -> Optional[schemas.Chapter]:
        """Chapter WITH its body text."""
        return self.find_by_id(chapter_id)

    def find_all_chapters(self) -> list[schemas.Chapter]:
        """All chapters in story order, without body text."""
        rows = self.db.execute(
            select(models.Chapter)
            .options(defer(models.Chapter.content))
            .order_by(*self._story_order())
        ).scalars().all()
        return [self._without_body(row) for row in rows]

    def find_chapters_by_volume(self, volume_id: int) -> list[schemas.Chapter]:
        rows = self.db.execute(
            select(models.Chapter)
            .options(defer(models.Chapter.content))
            .where(models.Chapter.volume_id == volume_id)
            .order_by(models.Chapter.sort_order, models.Chapter.id)
        ).scalars().all()
        return [self._without_body(row) for row in rows]

    def save_content(self, chapter_id: int, content: str) -> schemas.Chapter:
        """Replace the body text and refresh the word count."""
        row = self.db.get(models.Chapter, chapter_id)
        if row is None:
            raise EntityNotFoundError("Chapter", chapter_id)
        row.content = content
        row.word_count = count_words(content)
        self.db.commit()
        self.db.refresh(row)
        return self._without_body(row)
