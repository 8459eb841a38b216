"""
================================================================================
FILE: fruitstand/config/constants.py
================================================================================

PURPOSE:
    Application-wide constants. Immutable values used throughout codebase.
    Prevents magic strings in routes and the data-access layer.

CONSTANT CATEGORIES:
    1. API Configuration
       - API_PREFIX: "/api/v1"
       - API_TITLE: "Fruit REST API"

    2. Client error hints (returned verbatim as text/plain)
       - MSG_NON_NUMERIC_ID: "non numeric id"
       - MSG_NON_NUMERIC_DURATION: "non numeric duration"

    3. Fixed responses
       - MSG_OK: "ok"
       - MSG_NOT_IMPLEMENTED: "not implemented"

    4. SQL statements (parameterized, SQLAlchemy text() bind style)

KEY FACTS:
    - No computation, just literal values
    - No imports from other fruitstand modules (prevent circular deps)

TESTING ENVIRONMENT:
    - Reference constants in tests instead of repeating literals
"""

# ============================================================================
# API CONFIGURATION
# ============================================================================

API_PREFIX = "/api/v1"
API_TITLE = "Fruit REST API"
API_DESCRIPTION = "HTTPS REST API for fruits backed by PostgreSQL"

# ============================================================================
# RESPONSE BODIES
# ============================================================================

MSG_OK = "ok"
MSG_NOT_IMPLEMENTED = "not implemented"
MSG_NON_NUMERIC_ID = "non numeric id"
MSG_NON_NUMERIC_DURATION = "non numeric duration"
MSG_NO_ROWS = "no rows in result set"

# ============================================================================
# SQL
# ============================================================================

SQL_INSERT_FRUIT = "INSERT INTO fruit (name) VALUES (:name)"
SQL_LIST_FRUITS = "select p.id, p.name from fruit as p;"
SQL_GET_FRUIT_NAME = "select p.name from fruit as p where p.id = :id;"
SQL_SLEEP = "select pg_sleep(:seconds);"
SQL_PING = "SELECT 1"

# ============================================================================
# REQUEST LIFECYCLE
# ============================================================================

REQUEST_ID_HEADER = "X-Request-ID"
