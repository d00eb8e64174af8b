"""
learnpath/schemas/path.py
Learning path request/response schemas
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from learnpath.orm.learning_path import Difficulty
from learnpath.schemas.category import CategoryResponse


class PathCreate(BaseModel):
    """
    Used by: POST /api/path

    `order` is assigned as max(order) + 1 when omitted.
    """
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    category_id: int = Field(..., gt=0)
    difficulty: Optional[Difficulty] = None
    order: Optional[int] = None


class PathUpdate(BaseModel):
    """Partial update; only fields present in the body are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    category_id: Optional[int] = Field(None, gt=0)
    difficulty: Optional[Difficulty] = None
    order: Optional[int] = None

    @field_validator("title", "category_id", "order")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("cannot be null")
        return v


class PathResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    category_id: int
    difficulty: Optional[Difficulty] = None
    order: int
    created_at: datetime
    updated_at: datetime
    category: Optional[CategoryResponse] = None
    node_count: int = 0
