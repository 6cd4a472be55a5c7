"""
Core module for YouClinic CRM backend.

Contains configuration, database setup, security utilities and the
access policy.
"""

from .config import settings
from .database import get_db, engine, SessionLocal

__all__ = ["settings", "get_db", "engine", "SessionLocal"]
