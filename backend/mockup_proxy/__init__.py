"""
Mockup Approval Proxy - Application Package Initializer
=========================================================

What: Marks the `mockup_proxy` directory as a Python package.
Who:  Imported by uvicorn (`mockup_proxy.main:app`), Alembic and pytest.

Architecture Note:
    The proxy follows the same layered shape throughout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     Services (Integrations/Logic)   │  ← DocuSign, Brightpearl, SFTP
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Send Log Store (Persistence)      │  ← PostgreSQL table or JSON file
    └─────────────────────────────────────┘

    Routes translate requests into service calls; services own every
    outbound credential so nothing secret ever reaches the browser.
"""

__version__ = "1.0.0"
