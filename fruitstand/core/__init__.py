# 5 files: Storage access and request lifecycle
"""
================================================================================
FILE: fruitstand/core/__init__.py
================================================================================

PURPOSE:
    Package initialization for core layer. Exports the data-access layer,
    the per-request cancellation scope and the Fruit model.

OUTPUTS:
    - FruitRepository: parameterized SQL over the fruit table
    - RequestScope: deadline + client-disconnect scope for storage calls
    - Fruit: stored entity

TESTING ENVIRONMENT:
    - Import: from fruitstand.core import FruitRepository, RequestScope
"""

# ================================================================================
# IMPORTS & EXPORTS
# ================================================================================

from fruitstand.core.fruit_repository import FruitRepository
from fruitstand.core.models import Fruit
from fruitstand.core.request_scope import RequestScope

__all__ = [
    "FruitRepository",
    "Fruit",
    "RequestScope",
]
