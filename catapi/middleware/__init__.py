"""
Cat API — Middleware Package
==============================

Cross-cutting request handling shared by every route.

Execution order for an incoming request:
    [Request ID] → [Access Log] → [Rate Limit] → [GZip] → [CORS] → route

The request id is assigned first so the access log line and a 429 body
both carry it.
"""
