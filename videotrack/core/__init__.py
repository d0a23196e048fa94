"""
Videotrack - Core Module

This module contains configuration, database setup, and security utilities.

Settings are imported from videotrack.core.config directly; the player
loads videotrack.core.http_client without the server's environment.
"""

from videotrack.core.database import Base, get_db, get_engine

__all__ = ["Base", "get_db", "get_engine"]
