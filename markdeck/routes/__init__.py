# Routes package init
"""
MarkDeck — API Routes Package
==============================

What:  HTTP route handlers that accept requests and return responses.
How:   One module per resource; each exposes a module-level `router`.

Route Inventory:
    - presentations.py: /api/presentations          (CRUD, duplicate, render)
    - slides.py:        /api/slides                 (CRUD, reorder, duplicate, render)
    - markdown.py:      POST /api/markdown/render   (editor preview)
    - health.py:        GET  /health
    - views.py:         /, /presentations/{id}/edit, /presentations/{id}/view (HTML)

Routes stay thin: extract request data, call a service, return its result.
"""
