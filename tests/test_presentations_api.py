"""
MarkDeck — Presentation Endpoint Tests
=======================================

What:  /api/presentations over HTTP against an in-memory SQLite database.

What we test:
    ✅ Create seeds exactly one Welcome slide; missing/blank title → 400
    ✅ Search (title or description, case-insensitive) and pagination
    ✅ Partial update, delete cascade, duplicate, render
    ✅ Error body shape and unknown ids → 404
"""

import uuid
from unittest.mock import patch

import pytest

from markdeck.config import settings


class TestCreate:
    """POST /api/presentations."""

    @pytest.mark.asyncio
    async def test_create_seeds_welcome_slide(self, test_client):
        """A new presentation starts with exactly one Welcome slide at order 0."""
        response = await test_client.post(
            "/api/presentations",
            json={"title": "Quarterly Review", "description": "Q3 numbers", "theme": "dark"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["title"] == "Quarterly Review"
        assert body["theme"] == "dark"
        assert body["isPublic"] is False
        assert body["slideCount"] == 1
        assert len(body["slides"]) == 1

        welcome = body["slides"][0]
        assert welcome["title"] == "Welcome"
        assert welcome["order"] == 0
        assert welcome["layout"] == "title-content"
        assert welcome["content"].startswith("# Welcome to Your Presentation")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{}, {"title": ""}, {"title": "   "}, {"title": None}])
    async def test_missing_title_is_rejected(self, test_client, payload):
        """Missing, empty, blank or null title → 400 with the exact message."""
        response = await test_client.post("/api/presentations", json=payload)
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["message"] == "Title is required"
        assert body["request_id"]

    @pytest.mark.asyncio
    async def test_invalid_theme_is_a_400(self, test_client):
        response = await test_client.post("/api/presentations", json={"title": "T", "theme": "neon"})
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


class TestList:
    """GET /api/presentations search, pagination and ordering."""

    @pytest.mark.asyncio
    async def test_search_matches_title_or_description(self, test_client, create_presentation):
        """Search is a case-insensitive substring match on title OR description."""
        await create_presentation("Python Basics")
        await create_presentation("Cooking", description="Recipes written in PYTHON style")
        await create_presentation("Gardening")

        response = await test_client.get("/api/presentations", params={"search": "python"})
        assert response.status_code == 200
        body = response.json()
        assert body["totalCount"] == 2
        assert {item["title"] for item in body["presentations"]} == {"Python Basics", "Cooking"}

    @pytest.mark.asyncio
    async def test_pagination(self, test_client, create_presentation):
        """page/limit select the window; totals cover every match."""
        for index in range(5):
            await create_presentation(f"Deck {index}")

        response = await test_client.get("/api/presentations", params={"page": 2, "limit": 2})
        body = response.json()
        assert body["totalCount"] == 5
        assert body["totalPages"] == 3
        assert body["currentPage"] == 2
        assert len(body["presentations"]) == 2
        assert response.headers["X-Total-Count"] == "5"

    @pytest.mark.asyncio
    async def test_list_items_carry_slide_outline(self, test_client, create_presentation):
        await create_presentation("Outlined")
        item = (await test_client.get("/api/presentations")).json()["presentations"][0]
        assert item["slides"] == [
            {"id": item["slides"][0]["id"], "title": "Welcome", "order": 0}
        ]

    @pytest.mark.asyncio
    async def test_recently_modified_first(self, test_client, create_presentation):
        """Updating a presentation moves it to the top of the listing."""
        first = await create_presentation("First")
        await create_presentation("Second")
        await test_client.put(f"/api/presentations/{first['id']}", json={"description": "touched"})

        titles = [item["title"] for item in (await test_client.get("/api/presentations")).json()["presentations"]]
        assert titles[0] == "First"

    @pytest.mark.asyncio
    async def test_empty_listing(self, test_client):
        body = (await test_client.get("/api/presentations")).json()
        assert body == {"presentations": [], "totalCount": 0, "currentPage": 1, "totalPages": 0}


class TestGetUpdateDelete:
    """Single-presentation reads and writes."""

    @pytest.mark.asyncio
    async def test_get_unknown_presentation(self, test_client):
        response = await test_client.get(f"/api/presentations/{uuid.uuid4()}")
        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "not_found"
        assert body["message"] == "Presentation not found"

    @pytest.mark.asyncio
    async def test_partial_update(self, test_client, create_presentation):
        deck = await create_presentation("Old title", description="keep me")
        response = await test_client.put(
            f"/api/presentations/{deck['id']}", json={"title": "New title", "isPublic": True}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "New title"
        assert body["isPublic"] is True
        assert body["description"] == "keep me"
        assert body["theme"] == "default"

    @pytest.mark.asyncio
    async def test_update_blank_title_rejected(self, test_client, create_presentation):
        deck = await create_presentation()
        response = await test_client.put(f"/api/presentations/{deck['id']}", json={"title": " "})
        assert response.status_code == 400
        assert response.json()["message"] == "Title is required"

    @pytest.mark.asyncio
    async def test_delete_cascades_to_slides(self, test_client, create_presentation, add_slides):
        """Deleting a presentation removes every one of its slides."""
        deck = await create_presentation()
        slides = await add_slides(deck["id"], "Two", "Three")

        response = await test_client.delete(f"/api/presentations/{deck['id']}")
        assert response.status_code == 200
        assert response.json() == {"message": "Presentation deleted successfully"}

        assert (await test_client.get(f"/api/presentations/{deck['id']}")).status_code == 404
        for slide in slides:
            assert (await test_client.get(f"/api/slides/{slide['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_unknown(self, test_client):
        response = await test_client.delete(f"/api/presentations/{uuid.uuid4()}")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_malformed_id_is_a_400(self, test_client):
        """A path id that is not a UUID is a request validation error."""
        response = await test_client.get("/api/presentations/not-a-uuid")
        assert response.status_code == 400


class TestDuplicateAndRender:
    """Deep copy and the viewer payload."""

    @pytest.mark.asyncio
    async def test_duplicate_copies_slides_in_order(self, test_client, create_presentation, add_slides):
        """The copy is private, suffixed and keeps slide orders; slide ids are new."""
        deck = await create_presentation("Original", theme="minimal", isPublic=True)
        await add_slides(deck["id"], "Second", "Third")

        response = await test_client.post(f"/api/presentations/{deck['id']}/duplicate")
        assert response.status_code == 201
        copy = response.json()
        assert copy["id"] != deck["id"]
        assert copy["title"] == "Original (Copy)"
        assert copy["theme"] == "minimal"
        assert copy["isPublic"] is False
        assert copy["slideCount"] == 3
        assert [(s["title"], s["order"]) for s in copy["slides"]] == [
            ("Welcome", 0),
            ("Second", 1),
            ("Third", 2),
        ]

        original = (await test_client.get(f"/api/presentations/{deck['id']}")).json()
        assert {s["id"] for s in original["slides"]}.isdisjoint({s["id"] for s in copy["slides"]})

    @pytest.mark.asyncio
    async def test_render_presentation(self, test_client, create_presentation):
        deck = await create_presentation()
        response = await test_client.get(f"/api/presentations/{deck['id']}/render")
        assert response.status_code == 200
        body = response.json()
        assert body["slideCount"] == 1
        rendered = body["slides"][0]
        assert rendered["extractedTitle"] == "Welcome to Your Presentation"
        assert rendered["nodes"][0]["element"] == "h1"
        assert rendered["html"].startswith('<h1 class="heading-1">')


class TestHealthAndPreview:
    """Endpoints outside /api/presentations."""

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert "uptimeSeconds" in body

    @pytest.mark.asyncio
    async def test_markdown_preview(self, test_client):
        response = await test_client.post("/api/markdown/render", json={"content": "# Hi\n\n- a\n- b"})
        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Hi"
        assert body["isValid"] is True
        assert [node["element"] for node in body["nodes"]] == ["h1", "ul"]

    @pytest.mark.asyncio
    async def test_markdown_preview_of_non_string(self, test_client):
        body = (await test_client.post("/api/markdown/render", json={"content": 7})).json()
        assert body["isValid"] is False
        assert body["title"] == "Untitled Slide"
        assert "Error parsing markdown content" in body["html"]

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/api/presentations", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    async def test_rate_limit_answers_429(self, test_client):
        """Requests over the per-IP limit get 429 with Retry-After."""
        with patch.object(settings, "rate_limit_requests", 2):
            for _ in range(2):
                assert (await test_client.get("/api/presentations")).status_code == 200
            response = await test_client.get("/api/presentations", headers={"X-Request-ID": "limited"})
            assert (await test_client.get("/health")).status_code == 200

        assert response.status_code == 429
        assert int(response.headers["Retry-After"]) >= 1
        body = response.json()
        assert body["error"] == "rate_limit_exceeded"
        assert body["request_id"] == "limited"
