"""Shared repository plumbing over a synchronous SQLAlchemy session."""

from __future__ import annotations

from typing import Any, Generic, Iterable, Optional, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storyloom.models import Base

ModelT = TypeVar("ModelT", bound=Base)
SchemaT = TypeVar("SchemaT", bound=BaseModel)


def to_storable(value: Any) -> Any:
    """Turn nested pydantic models into plain JSON-compatible data."""
    if isinstance(value, BaseModel):
        return value.model_dump(exclude_none=True)
    if isinstance(value, list):
        return [to_storable(v) for v in value]
    if isinstance(value, dict):
        return {k: to_storable(v) for k, v in value.items()}
    return value


class BaseRepository(Generic[ModelT, SchemaT]):
    """CRUD basics for one table.

    Subclasses set ``model`` (ORM class), ``schema`` (read model) and, for
    tables keyed by prefixed string ids (``C001``, ``FS012`` ...), ``id_prefix``.
    Every read returns read models, ordered deterministically by primary key.
    """

    model: type[ModelT]
    schema: type[SchemaT]
    id_prefix: Optional[str] = None

    def __init__(self, db: Session):
        self.db = db

    def _to_schema(self, row: ModelT) -> SchemaT:
        return self.schema.model_validate(row)

    def _next_id(self) -> str:
        """Next prefixed id: one past the highest numeric suffix in use."""
        prefix = self.id_prefix or ""
        ids = self.db.execute(select(self.model.id)).scalars().all()
        numbers = [
            int(i[len(prefix):]) for i in ids
            if i.startswith(prefix) and i[len(prefix):].isdigit()
        ]
        return f"{prefix}{max(numbers, default=0) + 1:03d}"

    def _commit(self, row: ModelT) -> SchemaT:
        """Flush ``row``, read it back and commit only if it validates.

        A row that cannot be read back is rolled back, so nothing unreadable
        is ever stored.
        """
        try:
            self.db.flush()
            self.db.refresh(row)
            entity = self._to_schema(row)
        except (SQLAlchemyError, PydanticValidationError):
            self.db.rollback()
            raise
        self.db.commit()
        return entity

    def create(self, **values: Any) -> SchemaT:
        values = {k: to_storable(v) for k, v in values.items()}
        if self.id_prefix and "id" not in values:
            values["id"] = self._next_id()
        row = self.model(**values)
        self.db.add(row)
        return self._commit(row)

    def find_by_id(self, entity_id: Any) -> Optional[SchemaT]:
        row = self.db.get(self.model, entity_id)
        return self._to_schema(row) if row is not None else None

    def find_by_ids(self, entity_ids: Iterable[Any]) -> list[SchemaT]:
        """Batch lookup preserving the caller's id order; unknown ids are skipped."""
        wanted = list(dict.fromkeys(entity_ids))
        if not wanted:
            return []
        rows = self.db.execute(
            select(self.model).where(self.model.id.in_(wanted))
        ).scalars().all()
        by_id = {row.id: row for row in rows}
        return [self._to_schema(by_id[i]) for i in wanted if i in by_id]

    def find_all(self) -> list[SchemaT]:
        rows = self.db.execute(select(self.model).order_by(self.model.id)).scalars().all()
        return [self._to_schema(row) for row in rows]

    def count(self) -> int:
        return self.db.execute(select(func.count()).select_from(self.model)).scalar_one()

    def exists(self, entity_id: Any) -> bool:
        return self.db.get(self.model, entity_id) is not None

    def delete(self, entity_id: Any) -> bool:
        """Delete by id; returns False when nothing matched."""
        row = self.db.get(self.model, entity_id)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        return True
