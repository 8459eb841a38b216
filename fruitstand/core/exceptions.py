# MERGED: 3 sections with separation comments
#│   │   ├── SECTION 1: Base exceptions
#│   │   ├── SECTION 2: Storage exceptions
#│   │   └── SECTION 3: Client input & startup exceptions
"""
================================================================================
FILE: fruitstand/core/exceptions.py
================================================================================

PURPOSE:
    Custom exception hierarchy for the fruit backend. Every error a handler
    reports travels as one of these types; the app factory renders them as
    text/plain responses with the carried status code.

WORKFLOW:
    1. Define base exception class (FruitServiceException)
    2. Define exception categories:
       - ClientInputError: malformed request, 400, storage never contacted
       - StorageError: anything the database or driver reports, 500
       - ServiceInitializationError: startup failure, process exits
    3. Define specific storage failures so callers and tests can tell the
       listing failure modes apart

IMPORTS:
    - None (only Python builtins)

KEY FACTS:
    - NO imports from fruitstand modules (prevents circular dependencies)
    - message is what the client sees, verbatim
    - Nothing here is retried; every storage call is attempted once

EXCEPTION CATEGORIES:
    - CLIENT (400):
        * ClientInputError: non numeric id / duration, unreadable body
    - STORAGE (500):
        * StorageError: connection or statement failure
        * QueryCanceledError: deadline exceeded or client disconnected
        * NoRowsError: point lookup found nothing
        * RowDecodeError: a row could not be mapped to a Fruit
        * ResultReleaseError: closing the result set failed
    - FATAL:
        * ServiceInitializationError: engine could not be created or pinged

TESTING ENVIRONMENT:
    - Raise specific exception types from fake repositories
    - Assert status_code / message on the rendered response
"""

# ================================================================================
# IMPORTS
# ================================================================================

from typing import Optional, Dict, Any

# ================================================================================
# SECTION 1: BASE EXCEPTIONS
# ================================================================================

class FruitServiceException(Exception):
    """
    Root exception for all fruit service errors.

    Attributes:
        message (str): Text sent to the client as the response body
        error_code (str): Machine-readable error code for logging
        status_code (int): HTTP status the error is rendered with
        context (dict): Additional context for logs only (optional)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        context: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dict for structured logging"""
        return {
            "error": self.__class__.__name__,
            "error_code": self.error_code,
            "status_code": self.status_code,
            "message": self.message,
            "context": self.context,
        }


class ClientInputError(FruitServiceException):
    """Request could not be interpreted (400). Storage is never contacted."""

    status_code = 400

    def __init__(self, message: str, context: Optional[Dict] = None):
        super().__init__(message, error_code="CLIENT_INPUT_ERROR", context=context)

# ================================================================================
# SECTION 2: STORAGE EXCEPTIONS
# ================================================================================

class StorageError(FruitServiceException):
    """Database or driver failure (500). Message is the driver's text."""

    status_code = 500

    def __init__(
        self,
        message: str,
        context: Optional[Dict] = None,
        error_code: str = "STORAGE_ERROR",
    ):
        super().__init__(message, error_code=error_code, context=context)


class QueryCanceledError(StorageError):
    """Statement aborted because the request scope ended."""

    def __init__(self, message: str, context: Optional[Dict] = None):
        super().__init__(message, context=context, error_code="QUERY_CANCELED")


class NoRowsError(StorageError):
    """Point lookup returned no row."""

    def __init__(self, message: str, context: Optional[Dict] = None):
        super().__init__(message, context=context, error_code="NO_ROWS")


class RowDecodeError(StorageError):
    """A result row could not be decoded into a Fruit."""

    def __init__(self, message: str, context: Optional[Dict] = None):
        super().__init__(message, context=context, error_code="ROW_DECODE_ERROR")


class ResultReleaseError(StorageError):
    """Closing a result set failed."""

    def __init__(self, message: str, context: Optional[Dict] = None):
        super().__init__(message, context=context, error_code="RESULT_RELEASE_ERROR")

# ================================================================================
# SECTION 3: STARTUP EXCEPTIONS
# ================================================================================

class ServiceInitializationError(FruitServiceException):
    """Raised when the storage handle fails to initialize (fatal)."""

    def __init__(self, message: str, context: Optional[Dict] = None):
        super().__init__(message, error_code="SERVICE_INIT_ERROR", context=context)
