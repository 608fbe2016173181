"""ORM Models - SQLAlchemy declarative models for persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all / alembic
"""

from event_maker.models.event import Event  # noqa: F401
from event_maker.models.rate_limit_window import RateLimitWindow  # noqa: F401
