# 3 files: Settings layer
"""
================================================================================
FILE: fruitstand/config/__init__.py
================================================================================

PURPOSE:
    Package initialization for configuration layer. Exports the Settings
    class and constants for easy imports throughout the codebase.

OUTPUTS:
    - Settings: Configuration class
    - constants: API prefix, response messages, SQL text

KEY FACTS:
    - Minimal file (just re-exports)
    - Settings loaded once at startup

TESTING ENVIRONMENT:
    - Import: from fruitstand.config import Settings
"""

from fruitstand.config.settings import Settings
from fruitstand.config import constants

__all__ = ["Settings", "constants"]
