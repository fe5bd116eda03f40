"""
MarkDeck — Middleware Package
==============================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Rate Limit] → [Request ID] → [Access Log] → [GZip] → [CORS] → Route

    - Rate limit first: rejected requests never reach a database session
    - Request ID before logging: every access line carries the correlation ID
    - Responses travel back through the same chain, so X-Request-ID is set
      on every response, including errors
"""
