"""
Core utilities and configuration for the cron sync backend.

This package provides foundational components used throughout the job engine:

Modules:
    config: Application configuration and environment variable management
    database: Async engine and session factory for the destination store
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities

Usage:
    from core.config import settings
    from core.database import async_session_maker
    from core.exceptions import FetchError, StoreError, LedgerError
    from core.logging import setup_logging
"""

__all__ = [
    "config",
    "database",
    "exceptions",
    "logging",
]
