# Middleware package init
"""
TimeRelay Backend — Middleware Package
========================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    - Request ID: correlation id for every log line of a request
    - Logging: access log with status and duration
    - CORS: FastAPI's CORSMiddleware, open to any origin by default

    There is no rate limiting and no authentication; the relay trusts its
    callers.
"""
