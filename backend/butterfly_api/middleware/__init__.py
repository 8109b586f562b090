"""
Butterfly API — Middleware Package
===================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID: correlation id for logs and error bodies
    2. Logging: access line with status and duration, tagged with the id
    3. CORS: FastAPI's CORSMiddleware (handles preflight)
"""
