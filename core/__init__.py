"""
Core utilities and configuration for the contact feed service.

This package provides foundational components used throughout the pipeline:

Modules:
    config: Application configuration and environment variable management
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities

Usage:
    from core.config import settings
    from core.exceptions import FetchError, ParseError, CacheError
    from core.logging import setup_logging

Example:
    # Initialize logging
    setup_logging()

    # Read the configured source
    print(settings.CSV_URL)
"""

__all__ = [
    "settings",
    "setup_logging",
    # Exceptions
    "ContactFeedError",
    "FetchError",
    "NetworkError",
    "BadStatusError",
    "PayloadTooSmallError",
    "ParseError",
    "CacheError",
    "ExportError",
]
