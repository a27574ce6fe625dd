"""Tests for the context preview REST endpoints."""

import pytest
from fastapi.testclient import TestClient

from storyloom.app import app
from storyloom.database import get_db


@pytest.fixture
def client(db):
    def _override():
        yield db

    app.dependency_overrides[get_db] = _override
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def chapter(deps):
    deps.characters.create(name="Lin Feng", role="protagonist")
    return deps.chapters.create(content="从前有一座山", characters=["C001"])


class TestChapterContextEndpoints:

    def test_get_chapter_context(self, client, chapter):
        response = client.get(f"/chapters/{chapter.id}/context")
        assert response.status_code == 200
        body = response.json()
        assert [i["type"] for i in body["items"]] == ["chapter_content", "character"]
        assert body["truncated"] is False
        assert body["total_tokens"] == 9 + 6
        assert body["formatted"].startswith("<context>")

    def test_exclude_query(self, client, chapter):
        response = client.get(
            f"/chapters/{chapter.id}/context", params={"exclude": ["chapter_content"]},
        )
        assert [i["type"] for i in response.json()["items"]] == ["character"]

    def test_budget_query(self, client, chapter):
        body = client.get(f"/chapters/{chapter.id}/context", params={"budget": 9}).json()
        assert body["truncated"] is True
        assert [i["type"] for i in body["items"]] == ["chapter_content"]

    def test_missing_chapter_is_404(self, client):
        response = client.get("/chapters/999/context")
        assert response.status_code == 404
        assert response.json() == {
            "code": "NOT_FOUND",
            "message": "Chapter 999 not found",
            "context": {"entity_type": "Chapter", "entity_id": 999},
        }

    def test_invalid_exclude_rejected(self, client, chapter):
        response = client.get(f"/chapters/{chapter.id}/context", params={"exclude": ["nonsense"]})
        assert response.status_code == 422

    def test_post_with_additional_items(self, client, chapter):
        response = client.post(f"/chapters/{chapter.id}/context", json={
            "additional_items": [{"content": "Keep the tone grim."}, {"type": "hook", "content": "  "}],
            "exclude": ["character"],
        })
        assert response.status_code == 200
        items = response.json()["items"]
        assert [(i["type"], i["priority"]) for i in items] == [("chapter_content", 1020), ("custom", 200)]


class TestStoryContextEndpoint:

    def test_summary(self, client, chapter):
        body = client.get("/context/story", params={"mode": "summary"}).json()
        assert [i["content"] for i in body["items"]] == ["Characters: Lin Feng(protagonist)"]

    def test_full_default(self, client, chapter):
        body = client.get("/context/story").json()
        assert body["items"][0]["content"] == "### Lin Feng (protagonist)"

    def test_bad_mode(self, client):
        assert client.get("/context/story", params={"mode": "verbose"}).status_code == 422
