"""
learnpath/schemas/common.py
Shared request/response schemas

All endpoints use the standardized success envelope:
{
    "success": true,
    "message": "optional human-readable message",
    "data": ...
}
"""
from typing import Any, List, Optional
from pydantic import BaseModel, Field


def ok(data: Any = None, message: Optional[str] = None) -> dict:
    """Build a success envelope, omitting empty keys."""
    body = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    return body


# ================= REORDER =================

class ReorderItem(BaseModel):
    id: int = Field(..., gt=0)
    order: int = Field(..., ge=0)


class ReorderRequest(BaseModel):
    """
    Batch reorder body, applied in one transaction.

    Used by: PUT /api/path/reorder, POST /api/nodes/reorder
    """
    updates: List[ReorderItem] = Field(..., min_length=1)

    model_config = {
        "json_schema_extra": {
            "example": {"updates": [{"id": 3, "order": 0}, {"id": 1, "order": 1}]}
        }
    }
