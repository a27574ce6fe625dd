"""Arcs, foreshadowing and hooks."""

from __future__ import annotations

from sqlalchemy import select

from storyloom import models, schemas
from storyloom.repositories.base import BaseRepository


class ArcRepository(BaseRepository[models.Arc, schemas.Arc]):
    model = models.Arc
    schema = schemas.Arc
    id_prefix = "ARC"


class ForeshadowingRepository(BaseRepository[models.Foreshadowing, schemas.Foreshadowing]):
    """Foreshadowing lifecycle: planted → hinted → resolved / abandoned."""

    model = models.Foreshadowing
    schema = schemas.Foreshadowing
    id_prefix = "FS"

    def find_by_status(self, status: str) -> list[schemas.Foreshadowing]:
        rows = self.db.execute(
            select(models.Foreshadowing)
            .where(models.Foreshadowing.status == status)
            .order_by(models.Foreshadowing.id)
        ).scalars().all()
        return [self._to_schema(row) for row in rows]

    def find_active(self) -> list[schemas.Foreshadowing]:
        """Unresolved foreshadowing, ordered by id."""
        return self.find_by_status("active")


class HookRepository(BaseRepository[models.Hook, schemas.Hook]):
    model = models.Hook
    schema = schemas.Hook
    id_prefix = "H"

    def find_by_chapter(self, chapter_id: int) -> list[schemas.Hook]:
        rows = self.db.execute(
            select(models.Hook)
            .where(models.Hook.chapter_id == chapter_id)
            .order_by(models.Hook.id)
        ).scalars().all()
        return [self._to_schema(row) for row in rows]
