"""
Jam Session Backend — Application Package
==========================================

What: REST API for the jam session app: user profiles, location-tagged jams,
      and proximity search over jams.
Who:  Imported by uvicorn (jamsession.main:app), Alembic, and pytest.

Layers:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP verbs, paths, status codes
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← lookups, ownership, duplicates
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy/PostGIS + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.5.0"
