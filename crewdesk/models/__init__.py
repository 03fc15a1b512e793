"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Worker -> Category is many-to-one and required

Design Decisions:
    - One file per entity
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from crewdesk.models.category import Category  # noqa: F401
from crewdesk.models.worker import Worker  # noqa: F401
