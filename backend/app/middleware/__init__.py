# Middleware package init
"""
RedSocial Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route

    1. Rate Limit rejects abusive clients before any other work
    2. Request ID sets the correlation ID used by every later log line
    3. Logging writes one access line with status, duration and caller

Authentication is not middleware: it is a FastAPI dependency
(app.dependencies) so that OpenAPI documents the bearer scheme per route.
"""
