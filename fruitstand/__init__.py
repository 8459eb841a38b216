# fruitstand/__init__.py

"""
Fruit REST API backend package.

This package contains:
- api: FastAPI app factory, routes and dependencies
- config: settings and constants
- container: process-wide storage handle (engine + repository)
- core: data-access layer, request scope and exceptions
- server: HTTPS process entry point
"""

__all__ = ["__version__"]

__version__ = "1.0.0"
