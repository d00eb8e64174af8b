"""
learnpath/schemas/node.py
Node request/response schemas
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from learnpath.orm.content import ContentType
from learnpath.schemas.content import ContentDetail


class NodeCreate(BaseModel):
    """
    Used by: POST /api/nodes

    parent_id must name a node of the same path.
    """
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    order: int = Field(..., ge=0)
    path_id: int = Field(..., gt=0)
    parent_id: Optional[int] = Field(None, gt=0)
    content_id: Optional[int] = Field(None, gt=0)


class NodeUpdate(BaseModel):
    """Partial update. path_id is immutable and not accepted here."""
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    order: Optional[int] = Field(None, ge=0)
    parent_id: Optional[int] = Field(None, gt=0)
    content_id: Optional[int] = Field(None, gt=0)

    @field_validator("title", "order")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("cannot be null")
        return v


class NodeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    order: int
    path_id: int
    parent_id: Optional[int] = None
    content_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class ContentSummary(BaseModel):
    """Content fields shown inside tree and list items"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: ContentType
    title: str


class NodeListItem(NodeResponse):
    content: Optional[ContentSummary] = None


class NodeDetail(NodeResponse):
    content: Optional[ContentDetail] = None
    parent: Optional[NodeResponse] = None
    children: List[NodeListItem] = Field(default_factory=list)


class TreeNode(BaseModel):
    """One node of GET /api/nodes/tree, children nested and sorted."""
    id: int
    title: str
    description: Optional[str] = None
    order: int
    path_id: int
    parent_id: Optional[int] = None
    content_id: Optional[int] = None
    content: Optional[ContentSummary] = None
    children: List["TreeNode"] = Field(default_factory=list)


TreeNode.model_rebuild()
