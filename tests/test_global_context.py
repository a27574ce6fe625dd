"""Tests for story-wide context in full and summary modes."""

import pytest

from storyloom.context import ContextItemType


def _types(built):
    return [item.type for item in built.items]


@pytest.fixture
def populated(deps):
    d = deps
    d.characters.create(
        name="Lin Feng", role="protagonist",
        motivation={"surface": "find his sister", "hidden": "guilt", "core": "belonging"},
        facets={"public": "cheerful", "private": "lonely"},
    )
    d.characters.create(name="苏妍", role="rival", faction_id="F001")
    d.relationships.create(source_id="C001", target_id="C002", type="rival", evolution="grudging respect")
    d.relationships.create(source_id="C001", target_id="C404", type="debtor")
    d.locations.create(name="Cloud Gate", type="sect")
    d.factions.create(name="Azure Sect", leader_id="C002", goals=["expand"])
    d.arcs.create(name="Entrance Trial", status="in_progress")
    d.foreshadowing.create(content="The pendant glows", hints=[{"chapter": 1, "text": "warm"}])
    d.foreshadowing.create(content="旧债", status="resolved")
    d.world.upsert(power_system={"name": "Qi", "core_rules": ["No flight"]}, social_rules={"rank": "strict"})
    return d


class TestEmptyBible:

    def test_full_empty(self, global_builder):
        built = global_builder.build_full()
        assert built.items == []
        assert built.total_tokens == 0
        assert built.truncated is False

    def test_summary_empty(self, global_builder):
        built = global_builder.build_summary()
        assert built.items == []
        assert built.total_tokens == 0
        assert built.truncated is False


class TestBuildFull:

    def test_one_item_per_entity(self, populated, global_builder):
        built = global_builder.build_full()
        assert [i.id for i in built.items] == [
            "C001", "C002",
            "rel-1",
            "ARC001",
            "L001",
            "F001",
            "FS001", "FS002",
            "power-system", "social-rules",
        ]

    def test_dangling_relationship_skipped(self, populated, global_builder):
        built = global_builder.build_full()
        assert "rel-2" not in [i.id for i in built.items]

    def test_full_detail(self, populated, global_builder):
        built = global_builder.build_full()
        by_id = {i.id: i.content for i in built.items}
        assert "  Core: belonging" in by_id["C001"]
        assert "  Private: lonely" in by_id["C001"]
        assert by_id["rel-1"].startswith("Lin Feng → 苏妍: rival")
        assert "Evolution: grudging respect" in by_id["rel-1"]
        assert "Leader: 苏妍" in by_id["F001"]
        assert "Hints: chapter 1: warm" in by_id["FS001"]
        assert "Status: resolved" in by_id["FS002"]


class TestBuildSummary:

    def test_compact_items(self, populated, global_builder):
        built = global_builder.build_summary()
        assert [i.content for i in built.items] == [
            "Characters: Lin Feng(protagonist), 苏妍(rival)",
            "Arcs: Entrance Trial(in_progress)",
            "Active foreshadowing: The pendant glows",
        ]
        assert _types(built) == [
            ContextItemType.character, ContextItemType.arc, ContextItemType.foreshadowing,
        ]

    def test_world_rules_omitted(self, populated, global_builder):
        types = _types(global_builder.build_summary())
        assert ContextItemType.power_system not in types
        assert ContextItemType.social_rules not in types

    def test_summary_cheaper_than_full(self, populated, global_builder):
        assert global_builder.build_summary().total_tokens < global_builder.build_full().total_tokens

    def test_single_detailed_character(self, deps, global_builder):
        deps.characters.create(
            name="Lin Feng", role="protagonist",
            motivation={"surface": "a", "hidden": "b", "core": "c"},
            facets={"public": "d", "private": "e"},
        )
        assert global_builder.build_summary().total_tokens < global_builder.build_full().total_tokens

    @pytest.mark.parametrize("name,role", [
        ("A", "main"),
        ("林", "主角"),
        ("Lin Feng", "love interest"),
        ("林风", "protagonist"),
    ])
    def test_bare_character_never_costs_more(self, deps, global_builder, name, role):
        deps.characters.create(name=name, role=role)
        deps.characters.create(name=name + "2", role=role)
        deps.arcs.create(name=name, status="planned")
        deps.foreshadowing.create(content=name + "的秘密")
        deps.foreshadowing.create(content="a secret")
        assert global_builder.build_summary().total_tokens <= global_builder.build_full().total_tokens

    def test_budget_applies(self, populated, global_builder):
        built = global_builder.build_full(budget=20)
        assert built.truncated is True
        assert built.total_tokens <= 20 or len(built.items) == 1
