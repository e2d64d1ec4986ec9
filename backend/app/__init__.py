"""
RedSocial Backend — Application Package Initializer
=====================================================

What: Marks the `app` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend is layered the same way for every resource
    (users, follows, publications, comments):

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, identity injection
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Ownership checks, uniqueness rules
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes translate requests into service calls and never touch the ORM directly.
    Services raise typed exceptions from app.exceptions; main.py maps them to
    HTTP status codes.
"""

__version__ = "1.0.0"
