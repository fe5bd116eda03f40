"""
MarkDeck — Application Package Initializer
==========================================

What: Marks the `markdeck` directory as a Python package.
Who:  Imported by uvicorn (`markdeck.main:app`), Alembic, pytest and the API client.

Architecture Note:
    The service follows a layered architecture:

    ┌─────────────────────────────────────┐
    │    Routes (API + HTML views)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (ordering, markdown,     │  ← Business rules
    │   presentations, slides)            │
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    The `client` subpackage sits outside this stack: it talks to the API over
    HTTP and keeps an in-memory snapshot of what it fetched.
"""

__version__ = "1.0.0"
