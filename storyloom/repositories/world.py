"""World rules, locations and factions."""

from __future__ import annotations

from typing import Any, Optional

from storyloom import models, schemas
from storyloom.repositories.base import BaseRepository, to_storable

WORLD_ID = "main"


class WorldRepository(BaseRepository[models.World, schemas.World]):
    """The single story-wide world record."""

    model = models.World
    schema = schemas.World

    def get(self) -> Optional[schemas.World]:
        return self.find_by_id(WORLD_ID)

    def upsert(self, **values: Any) -> schemas.World:
        """Create the world record or update the given fields in place."""
        row = self.db.get(models.World, WORLD_ID)
        if row is None:
            row = models.World(id=WORLD_ID)
            self.db.add(row)
        for key, value in values.items():
            setattr(row, key, to_storable(value))
        return self._commit(row)


class LocationRepository(BaseRepository[models.Location, schemas.Location]):
    model = models.Location
    schema = schemas.Location
    id_prefix = "L"


class FactionRepository(BaseRepository[models.Faction, schemas.Faction]):
    model = models.Faction
    schema = schemas.Faction
    id_prefix = "F"
