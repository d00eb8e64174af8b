"""
learnpath/schemas/progress.py
Progress tracking schemas
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from learnpath.orm.user_progress import ProgressStatus
from learnpath.schemas.path import PathResponse


# ================= REQUEST SCHEMAS =================

class StartProgressRequest(BaseModel):
    """Used by: POST /api/progress/start"""
    path_id: int = Field(..., gt=0)


class CompleteNodeRequest(BaseModel):
    """Used by: POST /api/progress/{path_id}/complete"""
    node_id: int = Field(..., gt=0)


# ================= RESPONSE SCHEMAS =================

class ProgressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    path_id: int
    completed_nodes: List[int] = Field(default_factory=list)
    current_node_id: Optional[int] = None
    status: ProgressStatus
    started_at: datetime
    last_accessed_at: datetime
    completed_at: Optional[datetime] = None


class ProgressDetail(ProgressResponse):
    """
    Record plus computed counts.
    progress_percentage = round(100 * completed / total), 0 for empty paths.
    """
    path: Optional[PathResponse] = None
    total_nodes: int = Field(0, ge=0)
    completed_nodes_count: int = Field(0, ge=0)
    progress_percentage: int = Field(0, ge=0)


class ProgressStats(BaseModel):
    total_paths: int = Field(..., ge=0)
    completed_paths: int = Field(..., ge=0)
    in_progress_paths: int = Field(..., ge=0)
    total_nodes: int = Field(..., ge=0)
    completed_nodes: int = Field(..., ge=0)
    overall_progress: int = Field(..., ge=0)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "total_paths": 3,
                "completed_paths": 1,
                "in_progress_paths": 2,
                "total_nodes": 24,
                "completed_nodes": 11,
                "overall_progress": 46,
            }
        }
    )
