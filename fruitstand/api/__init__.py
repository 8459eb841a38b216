# 6 files: HTTP endpoints
"""
================================================================================
FILE: fruitstand/api/__init__.py
================================================================================

PURPOSE:
    Package initialization for API layer. Exports the routers and the app
    factory. Enables clean imports: from fruitstand.api import create_app

OUTPUTS:
    - router: /api/v1 fruit endpoints
    - home_router: / (always 500)
    - create_app: FastAPI application factory

TESTING ENVIRONMENT:
    - Build an app in tests: create_app(settings=Settings(...))
"""

# ================================================================================
# IMPORTS
# ================================================================================

from fruitstand.api.routes import home_router, router
from fruitstand.api.main import create_app

# ================================================================================
# PUBLIC API EXPORTS
# ================================================================================

__all__ = ["router", "home_router", "create_app"]
