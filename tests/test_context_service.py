"""Tests for ContextService orchestration and telemetry events."""

from unittest.mock import MagicMock

import pytest

from storyloom.errors import ValidationError
from storyloom.services import context_service
from storyloom.services.context_service import ContextService


@pytest.fixture
def logger(monkeypatch):
    mock = MagicMock()
    monkeypatch.setattr(context_service, "logger", mock)
    return mock


@pytest.fixture
def chapter(deps):
    deps.characters.create(name="Lin Feng", role="protagonist")
    return deps.chapters.create(content="从前有一座山", characters=["C001"])


class TestContextService:

    def test_chapter_context_formatted(self, db, chapter, logger):
        assembled = ContextService(db).for_chapter(chapter.id)
        assert assembled.formatted.startswith("<context>\n## Current Chapter\n从前有一座山")
        assert len(assembled.context.items) == 2

    def test_context_built_event(self, db, chapter, logger):
        ContextService(db).for_chapter(chapter.id, exclude=["character"])
        logger.info.assert_called_once()
        extra = logger.info.call_args.kwargs["extra"]
        assert extra["event_type"] == "context_built"
        assert extra["chapter_id"] == chapter.id
        assert extra["tokens_used"] == 9
        assert extra["item_count"] == 1
        assert extra["truncated"] is False
        logger.warning.assert_not_called()

    def test_truncation_warns(self, db, chapter, logger):
        ContextService(db).for_chapter(chapter.id, budget=9)
        logger.warning.assert_called_once()
        extra = logger.warning.call_args.kwargs["extra"]
        assert extra["event_type"] == "context_truncated"
        assert extra["budget"] == 9

    def test_story_modes(self, db, chapter, logger):
        service = ContextService(db)
        assert service.for_story("summary").context.items[0].content == "Characters: Lin Feng(protagonist)"
        assert service.for_story("full").context.items[0].id == "C001"
        assert logger.info.call_args.kwargs["extra"]["mode"] == "full"

    def test_unknown_mode(self, db, logger):
        with pytest.raises(ValidationError):
            ContextService(db).for_story("verbose")
