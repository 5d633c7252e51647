"""
IP Reverser: Application Package Initializer
==============================================

What: Marks the `ipreverser` directory as a Python package.
Who:  Imported by uvicorn, Alembic, pytest, and the `ipreverser` console script.

Architecture Note:
    The backend keeps the same layered shape as any of our FastAPI services:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     Services (Extract / Reverse)    │  ← pure IP logic + orchestration
    ├─────────────────────────────────────┤
    │        Record Store (Interface)     │  ← SQL or in-memory implementation
    ├─────────────────────────────────────┤
    │     Database (async SQLAlchemy)     │  ← pooled PostgreSQL connections
    └─────────────────────────────────────┘

    Extraction and reversal never touch HTTP or the database, so they are
    tested with plain dictionaries. Route tests swap the SQL store for the
    in-memory one.
"""

__version__ = "1.0.0"
