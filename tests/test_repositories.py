"""Tests for the story-bible repository layer."""

import pytest
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import inspect

from storyloom import models, schemas
from storyloom.errors import EntityNotFoundError
from storyloom.repositories import VolumeRepository


class TestBaseRepository:

    def test_prefixed_ids_increment(self, deps):
        first = deps.characters.create(name="A")
        second = deps.characters.create(name="B")
        assert (first.id, second.id) == ("C001", "C002")
        assert deps.arcs.create(name="Arc").id == "ARC001"
        assert deps.foreshadowing.create(content="x").id == "FS001"

    def test_explicit_id_kept(self, deps):
        deps.characters.create(id="C010", name="A")
        assert deps.characters.create(name="B").id == "C011"

    def test_find_by_ids_preserves_order_and_skips_missing(self, deps):
        for name in ("A", "B", "C"):
            deps.characters.create(name=name)
        found = deps.characters.find_by_ids(["C003", "C999", "C001", "C003"])
        assert [c.id for c in found] == ["C003", "C001"]
        assert deps.characters.find_by_ids([]) == []

    def test_nested_models_stored_as_json(self, deps):
        created = deps.characters.create(
            name="A", motivation=schemas.CharacterMotivation(surface="win"),
        )
        assert isinstance(created.motivation, schemas.CharacterMotivation)
        assert deps.characters.find_by_id(created.id).motivation.surface == "win"

    def test_count_exists_delete(self, deps):
        deps.locations.create(name="Gate")
        assert deps.locations.count() == 1
        assert deps.locations.exists("L001")
        assert deps.locations.delete("L001") is True
        assert deps.locations.delete("L001") is False
        assert deps.locations.find_all() == []

    def test_unreadable_row_rolled_back(self, deps):
        with pytest.raises(PydanticValidationError):
            deps.arcs.create(name="Arc", sections=[{"name": "Exam", "chapters": "soon"}])
        assert deps.arcs.count() == 0
        assert deps.arcs.create(name="Arc").id == "ARC001"


class TestChapterRepository:

    def test_sort_order_appends_within_volume(self, db, deps):
        volume = VolumeRepository(db).create(name="One")
        a = deps.chapters.create(volume_id=volume.id)
        b = deps.chapters.create(volume_id=volume.id)
        loose = deps.chapters.create()
        assert (a.sort_order, b.sort_order, loose.sort_order) == (1, 2, 1)

    def test_body_only_when_requested(self, deps):
        chapter = deps.chapters.create(content="Hello 世界")
        assert chapter.word_count == 3
        assert deps.chapters.find_chapter_by_id(chapter.id).content is None
        assert deps.chapters.find_chapter_with_content(chapter.id).content == "Hello 世界"
        assert all(c.content is None for c in deps.chapters.find_all_chapters())

    def test_listing_leaves_body_unloaded(self, db, deps):
        chapter = deps.chapters.create(content="A long body.")
        db.expunge_all()
        deps.chapters.find_all_chapters()
        row = db.get(models.Chapter, chapter.id)
        assert "content" in inspect(row).unloaded
        assert deps.chapters.find_chapter_with_content(chapter.id).content == "A long body."

    def test_story_order(self, db, deps):
        volumes = VolumeRepository(db)
        v1 = volumes.create(name="One")
        v2 = volumes.create(name="Two")
        late = deps.chapters.create(volume_id=v2.id)
        early = deps.chapters.create(volume_id=v1.id)
        assert [c.id for c in deps.chapters.find_all_chapters()] == [early.id, late.id]
        assert [c.id for c in deps.chapters.find_chapters_by_volume(v2.id)] == [late.id]

    def test_save_content(self, deps):
        chapter = deps.chapters.create()
        saved = deps.chapters.save_content(chapter.id, "one two three")
        assert saved.word_count == 3
        with pytest.raises(EntityNotFoundError):
            deps.chapters.save_content(999, "x")


class TestRelationshipsAndPlot:

    def test_find_between_is_directional(self, deps):
        deps.characters.create(name="A")
        deps.characters.create(name="B")
        deps.relationships.create(source_id="C001", target_id="C002", type="ally")
        assert deps.relationships.find_between("C001", "C002").type == "ally"
        assert deps.relationships.find_between("C002", "C001") is None
        assert len(deps.relationships.find_by_character("C002")) == 1

    def test_find_active_foreshadowing(self, deps):
        deps.foreshadowing.create(content="a")
        deps.foreshadowing.create(content="b", status="resolved")
        deps.foreshadowing.create(content="c")
        assert [f.id for f in deps.foreshadowing.find_active()] == ["FS001", "FS003"]

    def test_hooks_by_chapter(self, deps):
        deps.hooks.create(chapter_id=1, content="x")
        deps.hooks.create(chapter_id=2, content="y")
        assert [h.content for h in deps.hooks.find_by_chapter(2)] == ["y"]

    def test_world_upsert(self, deps):
        assert deps.world.get() is None
        deps.world.upsert(social_rules={"a": "b"})
        world = deps.world.upsert(power_system=schemas.PowerSystem(name="Qi"))
        assert world.social_rules == {"a": "b"}
        assert world.power_system.name == "Qi"

    def test_failed_world_upsert_keeps_previous_state(self, deps):
        deps.world.upsert(social_rules={"rank": "strict"})
        with pytest.raises(PydanticValidationError):
            deps.world.upsert(power_system={"levels": "many"})
        world = deps.world.get()
        assert world.power_system is None
        assert world.social_rules == {"rank": "strict"}
