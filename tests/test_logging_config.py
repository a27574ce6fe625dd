"""Tests for the JSON log formatter and the chapter-scoped adapter."""

import json
import logging

from storyloom.utils.logging_config import ChapterAdapter, JSONFormatter


def _format(message="Context built", **extra):
    record = logging.LogRecord("storyloom.test", logging.INFO, __file__, 1, message, (), None)
    record.__dict__.update(extra)
    return JSONFormatter().format(record)


class TestJSONFormatter:

    def test_build_telemetry_grouped(self):
        entry = json.loads(_format(
            event_type="context_built", chapter_id=3,
            budget=100, tokens_used=15, item_count=2, truncated=False,
        ))
        assert entry["event_type"] == "context_built"
        assert entry["chapter_id"] == 3
        assert entry["build"] == {"budget": 100, "tokens_used": 15, "item_count": 2, "truncated": False}
        assert "tokens_used" not in entry

    def test_plain_record_has_no_build_group(self):
        entry = json.loads(_format())
        assert entry["message"] == "Context built"
        assert entry["level"] == "INFO"
        assert "build" not in entry

    def test_non_ascii_kept_verbatim(self):
        line = _format("从前有一座山")
        assert "从前有一座山" in line


class TestChapterAdapter:

    def test_chapter_id_merged_into_extra(self):
        adapter = ChapterAdapter(logging.getLogger("storyloom.test"), chapter_id=7)
        msg, kwargs = adapter.process("layer assembled", {"extra": {"item_count": 1}})
        assert msg == "layer assembled"
        assert kwargs["extra"] == {"item_count": 1, "chapter_id": 7}
