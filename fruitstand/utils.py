"""
================================================================================
FILE: fruitstand/utils.py
================================================================================

PURPOSE:
Shared utility functions used across the backend. Includes request ID
generation, strict integer parsing for path/query parameters and logging
setup.

WORKFLOW:
1. SECTION 1: Common helpers - Request ID
2. SECTION 2: Input parsing - base-10 integers from path/query strings
3. SECTION 3: Logging setup - text or JSON lines on stderr

IMPORTS:
- uuid: Unique ID generation
- logging / json: Log formatting
- re: Integer syntax check

KEY FACTS:
- No imports from fruitstand modules (prevents circular dependencies)
- Request ID enables request tracking/correlation
- parse_int accepts an optional sign and ASCII digits only
"""
#================================================================================
#IMPORTS
#================================================================================

import json
import logging
import re
import sys
import uuid
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger(__name__)

# ============================================================================
# SECTION 1: COMMON HELPERS
# ============================================================================

def generate_request_id() -> str:
    """Generate unique request ID (UUID v4)."""
    return str(uuid.uuid4())

# ============================================================================
# SECTION 2: INPUT PARSING
# ============================================================================

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")

# Ids and durations are signed 64-bit integers
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1
_INT64_MAX_DIGITS = len(str(INT64_MAX))


def parse_int(value: Optional[str]) -> Optional[int]:
    """
    Parse a base-10 integer the strict way.

    Python's int() also accepts surrounding whitespace, underscores and
    non-ASCII digits; none of those are valid ids or durations. Values
    outside the signed 64-bit range are rejected too, before int() sees
    them (so thousands of digits never reach the conversion).

    Returns:
        The integer, or None when value is not an in-range integer literal
    """
    if value is None or not _INT_PATTERN.fullmatch(value):
        return None
    digits = value.lstrip("+-").lstrip("0") or "0"
    if len(digits) > _INT64_MAX_DIGITS:
        return None
    number = -int(digits) if value.startswith("-") else int(digits)
    if not INT64_MIN <= number <= INT64_MAX:
        return None
    return number

# ============================================================================
# SECTION 3: LOGGING SETUP
# ============================================================================

TEXT_LOG_FORMAT = (
    "%(asctime)s.%(msecs)03d %(levelname)s %(filename)s:%(lineno)d %(message)s"
)
TEXT_DATE_FORMAT = "%Y/%m/%d %H:%M:%S"


class JsonLogFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        request_id = getattr(record, "request_id", None)
        if request_id:
            entry["request_id"] = request_id
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def configure_logging(level: str = "INFO", fmt: str = "text") -> None:
    """
    Install a single stderr handler on the root logger.

    Args:
        level: DEBUG/INFO/WARNING/ERROR
        fmt: "text" (timestamp with milliseconds, file:line) or "json"
    """
    handler = logging.StreamHandler(sys.stderr)
    if fmt == "json":
        handler.setFormatter(JsonLogFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_LOG_FORMAT, TEXT_DATE_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    logger.debug(f"Logging configured: level={level} format={fmt}")
