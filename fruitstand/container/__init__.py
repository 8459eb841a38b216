"""
Container package.

Exports:
    ServiceContainer: Owner of the process-wide engine and repository.
"""

from .service_container import ServiceContainer

__all__ = ["ServiceContainer"]
