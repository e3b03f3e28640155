"""
Database Module
===============

Provides engine/session construction and the base model.
"""

from incubate.db.base import Base
from incubate.db.session import close_db, create_engine, create_session_factory, init_db

__all__ = ["Base", "close_db", "create_engine", "create_session_factory", "init_db"]
