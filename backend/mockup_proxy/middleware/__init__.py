# Middleware package init
"""
Mockup Approval Proxy - Middleware Package
============================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation ID set before anything logs
    2. Logging: access line with status and duration
    3. GZip / CORS: Starlette's stock middleware
"""
