"""
LearnHub Backend - Core Module

This module contains configuration, database setup, errors, and security utilities.
"""

from learnhub.core.config import get_settings, settings
from learnhub.core.database import Base, get_db, get_engine

__all__ = ["settings", "get_settings", "Base", "get_db", "get_engine"]
