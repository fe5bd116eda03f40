"""
MarkDeck — HTML View Tests
===========================

What:  Dashboard, editor and viewer pages rendered through Jinja2.
"""

import uuid

import pytest


class TestDashboard:
    """GET / dashboard page."""

    @pytest.mark.asyncio
    async def test_lists_presentations(self, test_client, create_presentation):
        await create_presentation("Roadmap <2025>", description="Plans")
        response = await test_client.get("/")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "Roadmap &lt;2025&gt;" in response.text
        assert "1 presentation" in response.text

    @pytest.mark.asyncio
    async def test_empty_dashboard(self, test_client):
        response = await test_client.get("/")
        assert "No presentations found." in response.text

    @pytest.mark.asyncio
    async def test_search_filters(self, test_client, create_presentation):
        await create_presentation("Alpha")
        await create_presentation("Beta")
        text = (await test_client.get("/", params={"search": "alp"})).text
        assert "Alpha" in text
        assert "Beta" not in text


class TestEditorAndViewer:
    """Editor and viewer pages."""

    @pytest.mark.asyncio
    async def test_editor_previews_selected_slide(self, test_client, create_presentation, add_slides):
        deck = await create_presentation("Editing")
        await add_slides(deck["id"], "Second")

        response = await test_client.get(f"/presentations/{deck['id']}/edit", params={"slide": 1})
        assert response.status_code == 200
        assert '<h1 class="heading-1">Second</h1>' in response.text

    @pytest.mark.asyncio
    async def test_viewer_clamps_slide_index(self, test_client, create_presentation, add_slides):
        """?slide past the end shows the last slide."""
        deck = await create_presentation("Showing")
        await add_slides(deck["id"], "Last")

        response = await test_client.get(f"/presentations/{deck['id']}/view", params={"slide": 99})
        assert response.status_code == 200
        assert '<h1 class="heading-1">Last</h1>' in response.text
        assert "2 / 2" in response.text
        assert 'rel="next"' not in response.text
        assert 'rel="prev"' in response.text

    @pytest.mark.asyncio
    async def test_viewer_first_slide(self, test_client, create_presentation):
        deck = await create_presentation()
        text = (await test_client.get(f"/presentations/{deck['id']}/view")).text
        assert "Welcome to Your Presentation" in text
        assert "1 / 1" in text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page", ["edit", "view"])
    async def test_unknown_presentation_page(self, test_client, page):
        """Unknown ids render the HTML 404 page, not the JSON body."""
        response = await test_client.get(f"/presentations/{uuid.uuid4()}/{page}")
        assert response.status_code == 404
        assert response.headers["content-type"].startswith("text/html")
        assert "Presentation not found" in response.text
