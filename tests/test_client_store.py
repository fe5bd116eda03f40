"""
MarkDeck — Client & Store Tests
================================

What:  MarkDeckClient against the in-process app (ASGITransport) and against
       canned responses (httpx.MockTransport); PresentationStore actions,
       subscriptions and the optimistic reorder rollback.
"""

import uuid
from datetime import datetime, timezone

import httpx
import pytest

from markdeck.client import ApiError, MarkDeckClient, PresentationState, PresentationStore
from markdeck.schemas.presentation import PresentationCreate, PresentationUpdate
from markdeck.schemas.presentation import PresentationResponse
from markdeck.schemas.slide import SlideCreate, SlideResponse


def make_deck(*titles):
    """A PresentationResponse built locally, slides ordered as given."""
    now = datetime.now(timezone.utc)
    deck_id = uuid.uuid4()
    slides = [
        SlideResponse(
            id=uuid.uuid4(),
            presentation_id=deck_id,
            title=title,
            content=f"# {title}",
            layout="title-content",
            order=index,
            created_at=now,
            updated_at=now,
        )
        for index, title in enumerate(titles)
    ]
    return PresentationResponse(
        id=deck_id,
        title="Local",
        theme="default",
        is_public=False,
        slide_count=len(slides),
        created_at=now,
        last_modified=now,
        slides=slides,
    )


def canned(status_code, payload):
    """A MarkDeckClient whose every request gets the same response."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=payload)

    return MarkDeckClient(base_url="http://test/api", transport=httpx.MockTransport(handler))


class TestClient:
    """MarkDeckClient request/response handling."""

    @pytest.mark.asyncio
    async def test_typed_round_trip(self, api_client):
        deck = await api_client.create_presentation(PresentationCreate(title="Typed", theme="dark"))
        assert deck.title == "Typed"
        assert deck.slides[0].title == "Welcome"

        slide = await api_client.create_slide(
            SlideCreate(presentation_id=deck.id, title="Second", content="## Two")
        )
        assert slide.order == 1

        slides = await api_client.reorder_slide(slide.id, 0)
        assert [item.title for item in slides] == ["Second", "Welcome"]

        rendered = await api_client.render_slide(slide.id)
        assert rendered.extracted_title == "Two"

    @pytest.mark.asyncio
    async def test_not_found_becomes_api_error(self, api_client):
        """A 404 body surfaces as ApiError with the server's message and code."""
        with pytest.raises(ApiError) as exc_info:
            await api_client.get_presentation(uuid.uuid4())
        error = exc_info.value
        assert error.status_code == 404
        assert error.error_code == "not_found"
        assert error.message == "Presentation not found"

    @pytest.mark.asyncio
    async def test_validation_message_is_kept(self, api_client):
        with pytest.raises(ApiError) as exc_info:
            await api_client.create_presentation(PresentationCreate(title="   "))
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Title is required"

    @pytest.mark.asyncio
    async def test_health_is_outside_api_prefix(self, api_client):
        health = await api_client.health()
        assert health.status == "healthy"

    @pytest.mark.asyncio
    async def test_render_markdown(self, api_client):
        result = await api_client.render_markdown("# Preview")
        assert result.title == "Preview"
        assert result.html == '<h1 class="heading-1">Preview</h1>'

    @pytest.mark.asyncio
    async def test_non_json_error_body(self):
        def handler(request):
            return httpx.Response(502, text="Bad Gateway")

        client = MarkDeckClient(base_url="http://test/api", transport=httpx.MockTransport(handler))
        with pytest.raises(ApiError) as exc_info:
            await client.list_presentations()
        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "Request failed with status 502"
        assert exc_info.value.error_code is None
        await client.aclose()

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        """Connection errors become ApiError with no status code."""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = MarkDeckClient(base_url="http://test/api", transport=httpx.MockTransport(handler))
        with pytest.raises(ApiError) as exc_info:
            await client.list_presentations()
        assert exc_info.value.status_code is None
        assert exc_info.value.error_code == "network_error"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_request_id_header_is_sent(self):
        seen = {}

        def handler(request):
            seen.update(request.headers)
            return httpx.Response(200, json={"message": "Slide deleted successfully"})

        client = MarkDeckClient(base_url="http://test/api", transport=httpx.MockTransport(handler))
        await client.delete_slide(uuid.uuid4())
        assert seen["x-request-id"]
        await client.aclose()


class TestStore:
    """PresentationStore actions and subscriptions."""

    @pytest.mark.asyncio
    async def test_create_fetch_and_delete(self, api_client):
        store = PresentationStore(api_client)
        created = await store.create_presentation(PresentationCreate(title="Stored"))
        assert [item.id for item in store.state.presentations] == [created.id]

        await store.fetch_presentations()
        assert [item.title for item in store.state.presentations] == ["Stored"]
        assert store.state.is_loading is False

        await store.fetch_presentation(created.id)
        assert store.state.current_presentation.id == created.id

        await store.delete_presentation(created.id)
        assert store.state.presentations == []
        assert store.state.current_presentation is None

    @pytest.mark.asyncio
    async def test_search_query_is_used(self, api_client):
        store = PresentationStore(api_client)
        await store.create_presentation(PresentationCreate(title="Alpha"))
        await store.create_presentation(PresentationCreate(title="Beta"))

        store.set_search_query("bet")
        await store.fetch_presentations()
        assert [item.title for item in store.state.presentations] == ["Beta"]

    @pytest.mark.asyncio
    async def test_failed_fetch_records_error(self, api_client):
        store = PresentationStore(api_client)
        await store.fetch_presentation(uuid.uuid4())
        assert store.state.error == "Presentation not found"
        assert store.state.is_loading is False

        store.clear_error()
        assert store.state.error is None

    @pytest.mark.asyncio
    async def test_failed_mutation_reraises(self, api_client):
        store = PresentationStore(api_client)
        with pytest.raises(ApiError):
            await store.update_presentation(uuid.uuid4(), PresentationUpdate(title="x"))
        assert store.state.error == "Presentation not found"

    @pytest.mark.asyncio
    async def test_slide_actions_keep_local_orders_dense(self, api_client):
        """Local slide orders match the server after insert, duplicate and delete."""
        store = PresentationStore(api_client)
        deck = await store.create_presentation(PresentationCreate(title="Slides"))
        await store.fetch_presentation(deck.id)

        second = await store.create_slide(SlideCreate(presentation_id=deck.id, title="Second"))
        first = await store.create_slide(SlideCreate(presentation_id=deck.id, title="First", order=0))
        local = store.state.current_presentation.slides
        assert [slide.title for slide in local] == ["First", "Welcome", "Second"]
        assert [slide.order for slide in local] == [0, 1, 2]

        copy = await store.duplicate_slide(first.id)
        assert copy.order == 1
        assert [slide.title for slide in store.state.current_presentation.slides] == [
            "First", "First", "Welcome", "Second",
        ]

        await store.delete_slide(second.id)
        local = store.state.current_presentation.slides
        assert [slide.order for slide in local] == [0, 1, 2]
        assert store.state.current_presentation.slide_count == 3

        server = await api_client.list_slides(deck.id)
        assert [slide.id for slide in server] == [slide.id for slide in local]

    @pytest.mark.asyncio
    async def test_reorder_uses_server_order(self, api_client):
        store = PresentationStore(api_client)
        deck = await store.create_presentation(PresentationCreate(title="Moves"))
        await store.create_slide(SlideCreate(presentation_id=deck.id, title="B"))
        await store.fetch_presentation(deck.id)

        welcome = store.state.current_presentation.slides[0]
        await store.reorder_slide(welcome.id, 1)
        assert [slide.title for slide in store.state.current_presentation.slides] == ["B", "Welcome"]

    @pytest.mark.asyncio
    async def test_reorder_rolls_back_on_failure(self):
        """The optimistic move is published, then undone when the server fails."""
        client = canned(500, {"error": "server_error", "message": "An internal error occurred."})
        deck = make_deck("A", "B", "C")
        store = PresentationStore(client, initial=PresentationState(current_presentation=deck))

        snapshots = []
        store.subscribe(snapshots.append)

        with pytest.raises(ApiError):
            await store.reorder_slide(deck.slides[0].id, 2)

        optimistic, restored = snapshots
        assert [slide.title for slide in optimistic.current_presentation.slides] == ["B", "C", "A"]
        assert [slide.title for slide in restored.current_presentation.slides] == ["A", "B", "C"]
        assert restored.error == "An internal error occurred."
        assert store.state is restored
        await client.aclose()

    @pytest.mark.asyncio
    async def test_negative_reorder_is_reported_as_api_error(self, api_client):
        """A negative target reaches the server and comes back as ApiError in state.error."""
        store = PresentationStore(api_client)
        deck = await store.create_presentation(PresentationCreate(title="Negative"))
        await store.fetch_presentation(deck.id)
        welcome = store.state.current_presentation.slides[0]

        with pytest.raises(ApiError) as exc_info:
            await store.reorder_slide(welcome.id, -1)

        assert exc_info.value.status_code == 400
        assert store.state.error == "Valid new order is required"
        assert [slide.id for slide in store.state.current_presentation.slides] == [welcome.id]
        assert store.state.current_presentation.slides[0].order == 0

    def test_navigation_stays_in_bounds(self):
        store = PresentationStore(canned(200, {}), initial=PresentationState(current_presentation=make_deck("A", "B")))

        store.previous_slide()
        assert store.state.current_slide_index == 0
        store.next_slide()
        store.next_slide()
        assert store.state.current_slide_index == 1
        store.set_current_slide_index(10)
        assert store.state.current_slide_index == 1
        store.set_current_slide_index(-4)
        assert store.state.current_slide_index == 0

    def test_subscribe_and_unsubscribe(self):
        store = PresentationStore(canned(200, {}))
        seen = []
        unsubscribe = store.subscribe(lambda state: seen.append(state.is_edit_mode))

        store.set_edit_mode(True)
        unsubscribe()
        store.set_edit_mode(False)

        assert seen == [True]
        assert store.state.is_edit_mode is False

    def test_selected_slide(self):
        store = PresentationStore(canned(200, {}))
        slide_id = uuid.uuid4()
        store.set_selected_slide(slide_id)
        assert store.state.selected_slide_id == slide_id
