# Routes package init
"""
Mockup Approval Proxy - API Routes Package
============================================

Route Inventory:
    - signature.py:   POST /send-to-docusign
    - send_logs.py:   GET  /api/docusign-logs
    - images.py:      GET  /image, GET /fetch-image
    - brightpearl.py: GET  /api/brightpearl/...
    - health.py:      GET  /, /health, /check-limits

Routes are thin: read the request, call a service, return its result.
Errors are raised as ProxyError subclasses and shaped by main.py.
"""
