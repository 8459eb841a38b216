# ============================================================================
# API Models - Response Schemas
# ============================================================================

"""
Pydantic models for API responses.
Used for type hints and OpenAPI documentation.
"""

from typing import List

from pydantic import BaseModel, Field

from fruitstand.core.models import Fruit


# ============================================================================
# FRUIT RESPONSES
# ============================================================================


class FruitListResponse(BaseModel):
    """Response model for GET /api/v1/fruits. Empty storage → []."""
    fruits: List[Fruit] = Field(default_factory=list)

    model_config = {
        "json_schema_extra": {
            "example": {
                "fruits": [
                    {"id": 1, "name": "apple"},
                    {"id": 2, "name": "durian"},
                ]
            }
        }
    }


# Single item responses reuse the domain model as-is.
FruitResponse = Fruit
