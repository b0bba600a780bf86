"""Database layer: SQLAlchemy 2.0 async models and engine."""

from __future__ import annotations

from smartcity.db.base import Base
from smartcity.db.engine import DatabaseManager

__all__ = ["Base", "DatabaseManager"]
