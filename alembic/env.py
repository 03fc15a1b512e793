"""Alembic environment — async migration runner for Crewdesk.

Uses async engine for PostgreSQL migrations. Imports all models
to ensure metadata is populated before autogenerate.

Design Decisions:
    - Reads DATABASE_URL from env when set
    - Converts postgresql:// → postgresql+asyncpg:// (same as config.py)
    - Falls back to alembic.ini value for local docker-compose
"""

import asyncio
import os
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

from crewdesk.db.base import Base
# Import all models so Base.metadata has them
from crewdesk.models.category import Category  # noqa: F401
from crewdesk.models.worker import Worker  # noqa: F401
