"""Category model."""

from typing import Optional
from pydantic import BaseModel, Field


class Category(BaseModel):
    """Task category, shown on notification toasts."""
    category_id: str = Field(..., description="Category ID (text)")
    name: str = Field(..., description="Category name")
    color: Optional[str] = Field(None, description="Display color")
