"""Settings, database sessions and credential helpers shared by the API, services and scripts."""

from quickdesk.core.config import Settings, get_settings, settings
from quickdesk.core.database import SessionLocal, create_db_engine, get_db

__all__ = ["Settings", "SessionLocal", "create_db_engine", "get_db", "get_settings", "settings"]
