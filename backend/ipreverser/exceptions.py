"""
IP Reverser: Custom Exception Hierarchy
=========================================

What:  Application-specific exceptions for the three failure kinds the service has.
How:   Each exception carries a message and an optional context dict. Routes
       catch them at the HTTP boundary and answer with an opaque 500 body;
       the context only ever reaches the log.

Exception Hierarchy:
    IPReverserError (base)
    ├── InvalidInputError   → request failure (malformed or missing IP)
    ├── StorageError        → request failure (pool, connectivity, query)
    └── StartupError        → fatal, raised before accepting traffic

Extraction never raises: it always falls back to a literal address.
"""

from typing import Any, Dict, Optional


class IPReverserError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  Short description, safe to log at ERROR level
        context:  Debug details (driver error type, input value); logged,
                  never returned to the client
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class InvalidInputError(IPReverserError):
    """
    Raised when an IP address is missing or not shaped like a dotted quad.

    When:  reverse_ip("") / reverse_ip(None) / reverse_ip("invalid-ip"),
           or a non-positive limit passed to a record store listing.
    """

    def __init__(
        self,
        message: str = "Invalid input",
        value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if value is not None:
            ctx["value"] = value
        super().__init__(message=message, context=ctx)
        self.value = value


class StorageError(IPReverserError):
    """
    Raised when the record store cannot complete an operation.

    When:  Connection refused, pool exhausted past its acquisition timeout,
           constraint violation, or any driver-level failure.

    Security Note:
        SQL text and driver messages stay in `context` and the log.
        The HTTP layer only ever answers with a generic failure.
    """

    def __init__(
        self,
        message: str = "A storage error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StartupError(IPReverserError):
    """
    Raised when the persistent schema cannot be initialized.

    When:  RecordStore.initialize() exhausted its retries.
    Effect: Propagates out of the lifespan handler, so uvicorn aborts
            startup and the process exits non-zero.
    """

    def __init__(
        self,
        message: str = "Database initialization failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
