"""
MarkDeck — Python client

    MarkDeckClient      async HTTP client for the REST API
    ApiError            every failed call, normalised
    PresentationStore   explicit state container over a MarkDeckClient
"""

from markdeck.client.api import ApiError, MarkDeckClient
from markdeck.client.state import PresentationState, PresentationStore

__all__ = ["ApiError", "MarkDeckClient", "PresentationState", "PresentationStore"]
