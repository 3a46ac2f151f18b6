"""
Custom exceptions for the contact feed pipeline with structured error context.

Every component raises its own error kind; the ingestion runner is the
only place these are caught and turned into fallback-ladder progression.

Exception Hierarchy:
    ContactFeedError (base)
    ├── FetchError
    │   ├── NetworkError
    │   ├── BadStatusError
    │   └── PayloadTooSmallError
    ├── ParseError
    ├── CacheError
    └── ExportError
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class ContactFeedError(Exception):
    """
    Base exception for all contact feed errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (url, stage, path, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[BaseException] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        # Add timestamp to context
        self.context["error_timestamp"] = self.timestamp.isoformat()

        # Chain original exception if provided
        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Fetch Errors
# ============================================================================

class FetchError(ContactFeedError):
    """
    Raised when the remote CSV could not be retrieved.

    The fetcher raises the base class once its attempts are exhausted;
    the subclasses describe why a single attempt failed.

    Context should include:
        - url: The URL that was requested
        - attempts: Number of attempts made
    """
    pass


class NetworkError(FetchError):
    """Transport failure or timeout on a single attempt."""
    pass


class BadStatusError(FetchError):
    """The server answered with a non-success status."""

    def __init__(
        self,
        message: str,
        status_code: int,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[BaseException] = None
    ):
        super().__init__(message, context, original_exception)
        self.status_code = status_code
        self.context["status_code"] = status_code


class PayloadTooSmallError(FetchError):
    """The body is too short to be a real CSV export."""
    pass


# ============================================================================
# Parse Errors
# ============================================================================

class ParseError(ContactFeedError):
    """
    Raised when raw CSV text yields no usable records.

    Context should include:
        - strategies: Names of the strategies that were tried
        - length: Length of the raw text
    """
    pass


# ============================================================================
# Cache Errors
# ============================================================================

class CacheError(ContactFeedError):
    """
    Raised when the durable cache cannot serve a payload and no
    fallback payload exists.

    Context should include:
        - cache_file: Path of the cached payload
        - url: Source URL the cache mirrors
    """
    pass


# ============================================================================
# Export Errors
# ============================================================================

class ExportError(ContactFeedError):
    """Writing or sharing an export file failed."""
    pass
