"""
Brainboard Backend: Middleware Package
======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [No-Store] → [GZip] → [CORS] → Route Handler

    - Request ID runs first so every later log line can carry the id
    - Logging measures the full duration including compression
    - CORS answers preflight requests before routing
"""
