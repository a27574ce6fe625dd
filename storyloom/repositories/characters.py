"""Characters and the relationships between them."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import or_, select

from storyloom import models, schemas
from storyloom.repositories.base import BaseRepository


class CharacterRepository(BaseRepository[models.Character, schemas.Character]):
    model = models.Character
    schema = schemas.Character
    id_prefix = "C"


class RelationshipRepository(BaseRepository[models.Relationship, schemas.Relationship]):
    """Directed relationships (source → target); at most one per ordered pair."""

    model = models.Relationship
    schema = schemas.Relationship

    def find_between(self, source_id: str, target_id: str) -> Optional[schemas.Relationship]:
        """The relationship from ``source_id`` to ``target_id`` (one direction only)."""
        row = self.db.execute(
            select(models.Relationship).where(
                models.Relationship.source_id == source_id,
                models.Relationship.target_id == target_id,
            )
        ).scalar_one_or_none()
        return self._to_schema(row) if row is not None else None

    def find_by_character(self, character_id: str) -> list[schemas.Relationship]:
        """Relationships where the character is either side."""
        rows = self.db.execute(
            select(models.Relationship)
            .where(or_(
                models.Relationship.source_id == character_id,
                models.Relationship.target_id == character_id,
            ))
            .order_by(models.Relationship.id)
        ).scalars().all()
        return [self._to_schema(row) for row in rows]
