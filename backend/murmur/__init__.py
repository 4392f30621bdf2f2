"""
Murmur Backend — Application Package
======================================

What:  A small social backend: registration, token login, posts, follows, feed.
Who:   Imported by uvicorn (`murmur.main:app`), Alembic, and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Dependencies (Token Guard, DI)    │  ← identity + service wiring
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← validation, store calls
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │      Database handle (Persistence)  │  ← owned by the app lifespan
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
