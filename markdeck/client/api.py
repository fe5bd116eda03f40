"""
MarkDeck — HTTP API Client
===========================

What:  Async client for the MarkDeck REST API.
How:   One httpx.AsyncClient with two event hooks:

           request   logs "GET /presentations" and attaches X-Request-ID
           response  turns every non-2xx response into ApiError, using the
                     server's {"error", "message"} body when there is one

       Transport failures (connection refused, timeout) also surface as
       ApiError. Nothing is retried.
Who:   PresentationStore (markdeck.client.state) and scripts.

Usage:
    async with MarkDeckClient("http://localhost:8000/api") as client:
        deck = await client.create_presentation(PresentationCreate(title="Demo"))
        slides = await client.reorder_slide(deck.slides[0].id, 0)
"""

import logging
from typing import Any, List, Optional
from uuid import UUID

import httpx
from pydantic import TypeAdapter

from markdeck.config import settings
from markdeck.middleware.request_id import REQUEST_ID_HEADER, new_request_id
from markdeck.schemas.common import HealthResponse, MessageResponse
from markdeck.schemas.markdown import MarkdownRenderResponse
from markdeck.schemas.presentation import (
    PresentationCreate,
    PresentationListResponse,
    PresentationRenderResponse,
    PresentationResponse,
    PresentationUpdate,
)
from markdeck.schemas.slide import (
    RenderedSlide,
    SlideCreate,
    SlideDetailResponse,
    SlideResponse,
    SlideUpdate,
)

logger = logging.getLogger(__name__)

_slide_list = TypeAdapter(List[SlideResponse])


class ApiError(Exception):
    """
    Any failed API call.

    Attributes:
        message:     server-provided message, or the transport error text
        status_code: HTTP status, None for transport failures
        error_code:  server error code ("validation_error", "not_found", ...)
    """

    def __init__(
        self,
        message: str = "An error occurred",
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(message)

    def __repr__(self) -> str:
        return f"ApiError(status_code={self.status_code}, error_code={self.error_code!r}, message={self.message!r})"


def _body(model: Any) -> Any:
    """camelCase JSON for a request model; only fields the caller set."""
    return model.model_dump(mode="json", by_alias=True, exclude_unset=True)


class MarkDeckClient:
    """Thin typed wrapper over the REST endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=timeout if timeout is not None else settings.api_timeout,
            headers={"Content-Type": "application/json"},
            event_hooks={
                "request": [self._log_request],
                "response": [self._raise_for_error],
            },
            transport=transport,
        )

    async def __aenter__(self) -> "MarkDeckClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ── Event hooks ───────────────────────────────────────────────────────

    @staticmethod
    async def _log_request(request: httpx.Request) -> None:
        request.headers.setdefault(REQUEST_ID_HEADER, new_request_id())
        logger.debug(
            "Making %s request to %s [%s]",
            request.method,
            request.url.path,
            request.headers[REQUEST_ID_HEADER],
        )

    @staticmethod
    async def _raise_for_error(response: httpx.Response) -> None:
        if response.is_success:
            return

        # Hooks run before the body is read
        await response.aread()
        message = f"Request failed with status {response.status_code}"
        error_code = None
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            message = payload.get("message") or payload.get("error") or message
            error_code = payload.get("error")

        logger.error(
            "API Error: %s %s → %d %s",
            response.request.method,
            response.request.url.path,
            response.status_code,
            message,
        )
        raise ApiError(message=message, status_code=response.status_code, error_code=error_code)

    async def _request(self, method: str, url: Any, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TransportError as e:
            message = str(e) or type(e).__name__
            logger.error("API Error: %s %s → %s", method, url, message)
            raise ApiError(message=message, error_code="network_error") from e
        return response.json()

    # ── Presentations ─────────────────────────────────────────────────────

    async def list_presentations(
        self,
        search: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> PresentationListResponse:
        params = {
            name: value
            for name, value in (("search", search), ("page", page), ("limit", limit))
            if value
        }
        data = await self._request("GET", "/presentations", params=params)
        return PresentationListResponse.model_validate(data)

    async def get_presentation(self, presentation_id: UUID) -> PresentationResponse:
        data = await self._request("GET", f"/presentations/{presentation_id}")
        return PresentationResponse.model_validate(data)

    async def create_presentation(self, presentation: PresentationCreate) -> PresentationResponse:
        data = await self._request("POST", "/presentations", json=_body(presentation))
        return PresentationResponse.model_validate(data)

    async def update_presentation(
        self, presentation_id: UUID, changes: PresentationUpdate
    ) -> PresentationResponse:
        data = await self._request("PUT", f"/presentations/{presentation_id}", json=_body(changes))
        return PresentationResponse.model_validate(data)

    async def delete_presentation(self, presentation_id: UUID) -> MessageResponse:
        data = await self._request("DELETE", f"/presentations/{presentation_id}")
        return MessageResponse.model_validate(data)

    async def duplicate_presentation(self, presentation_id: UUID) -> PresentationResponse:
        data = await self._request("POST", f"/presentations/{presentation_id}/duplicate")
        return PresentationResponse.model_validate(data)

    async def render_presentation(self, presentation_id: UUID) -> PresentationRenderResponse:
        data = await self._request("GET", f"/presentations/{presentation_id}/render")
        return PresentationRenderResponse.model_validate(data)

    # ── Slides ────────────────────────────────────────────────────────────

    async def list_slides(self, presentation_id: UUID) -> List[SlideResponse]:
        data = await self._request("GET", f"/slides/presentation/{presentation_id}")
        return _slide_list.validate_python(data)

    async def get_slide(self, slide_id: UUID) -> SlideDetailResponse:
        data = await self._request("GET", f"/slides/{slide_id}")
        return SlideDetailResponse.model_validate(data)

    async def create_slide(self, slide: SlideCreate) -> SlideResponse:
        data = await self._request("POST", "/slides", json=_body(slide))
        return SlideResponse.model_validate(data)

    async def update_slide(self, slide_id: UUID, changes: SlideUpdate) -> SlideResponse:
        data = await self._request("PUT", f"/slides/{slide_id}", json=_body(changes))
        return SlideResponse.model_validate(data)

    async def delete_slide(self, slide_id: UUID) -> MessageResponse:
        data = await self._request("DELETE", f"/slides/{slide_id}")
        return MessageResponse.model_validate(data)

    async def reorder_slide(self, slide_id: UUID, new_order: int) -> List[SlideResponse]:
        data = await self._request("PUT", f"/slides/{slide_id}/reorder", json={"newOrder": new_order})
        return _slide_list.validate_python(data)

    async def duplicate_slide(self, slide_id: UUID) -> SlideResponse:
        data = await self._request("POST", f"/slides/{slide_id}/duplicate")
        return SlideResponse.model_validate(data)

    async def render_slide(self, slide_id: UUID) -> RenderedSlide:
        data = await self._request("GET", f"/slides/{slide_id}/render")
        return RenderedSlide.model_validate(data)

    # ── Markdown & health ─────────────────────────────────────────────────

    async def render_markdown(self, content: str) -> MarkdownRenderResponse:
        data = await self._request("POST", "/markdown/render", json={"content": content})
        return MarkdownRenderResponse.model_validate(data)

    async def health(self) -> HealthResponse:
        # /health lives at the server root, outside the /api prefix
        data = await self._request("GET", self._client.base_url.join("/health"))
        return HealthResponse.model_validate(data)
