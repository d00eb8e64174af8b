"""
learnpath/schemas/category.py
Category request/response schemas
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from learnpath.orm.learning_path import Difficulty


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., min_length=1, max_length=120, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    description: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"name": "Web Development", "slug": "web-development", "description": None}
        }
    )


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CategoryPathItem(BaseModel):
    """Path summary nested in a category detail"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    order: int


class CategoryDetail(CategoryResponse):
    paths: List[CategoryPathItem] = Field(default_factory=list)
