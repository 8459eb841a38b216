# ============================================================================
# Domain Models - Fruit
# ============================================================================

"""
Pydantic model for the single stored entity.
Rows read from storage are validated through it; a row that does not fit
(NULL name, non-integer id) is a decode error.
"""

from pydantic import BaseModel, Field


class Fruit(BaseModel):
    """A stored fruit. id is assigned by the database."""
    id: int = Field(..., description="Database-assigned identifier")
    name: str = Field(..., description="User-supplied name, may be empty")

    model_config = {
        "json_schema_extra": {
            "example": {"id": 1, "name": "durian"},
        }
    }
