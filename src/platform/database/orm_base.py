"""
SQLAlchemy declarative base.

Models only describe the schema for alembic; runtime queries go through asyncpg.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
