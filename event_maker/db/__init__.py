"""Database Infrastructure - SQLAlchemy declarative Base shared by models and alembic.

Invariants:
    - All sessions are async (AsyncSession), created by infrastructure/database.py

Design Decisions:
    - asyncpg driver for PostgreSQL, aiosqlite for tests and local runs
"""
