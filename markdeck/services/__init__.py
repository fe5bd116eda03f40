# Services package init
"""
MarkDeck — Services Layer
==========================

What:  Business logic between routes (HTTP) and the database.
How:   Stateless singletons; database-backed methods receive the request's
       AsyncSession.

Service Inventory:
    - PresentationService: presentation CRUD, search, duplicate, render
    - SlideService:        slide CRUD and position changes
    - OrderingMaintainer:  writes slide ordering plans (markdeck.ordering)
    - MarkdownService:     markdown → tree → rendered nodes → HTML
"""
