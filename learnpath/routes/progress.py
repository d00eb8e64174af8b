"""
learnpath/routes/progress.py
Progress lifecycle routes; every record belongs to the caller

GET    /progress                     all own records, most recent first
GET    /progress/stats               aggregate counts
GET    /progress/{path_id}           one record with percentage
POST   /progress/start               {path_id}, idempotent
POST   /progress/{path_id}/complete  {node_id}, idempotent per node
POST   /progress/{path_id}/reset     zero the record
DELETE /progress/{path_id}           abandon (delete the record)
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnpath.database import get_db
from learnpath.orm.user_progress import UserProgress
from learnpath.rbac import AuthUser, get_current_user
from learnpath.routes.paths import path_data
from learnpath.schemas.common import ok
from learnpath.schemas.progress import (
    CompleteNodeRequest,
    ProgressResponse,
    ProgressStats,
    StartProgressRequest,
)
from learnpath.services import progress_service

router = APIRouter(prefix="/progress", tags=["Progress"])


def record_data(record: UserProgress) -> dict:
    return ProgressResponse.model_validate(record).model_dump(mode="json")


def summary_data(summary: Dict[str, Any]) -> dict:
    data = record_data(summary["record"])
    path = summary["path"]
    data["path"] = path_data(path, summary["total_nodes"]) if path is not None else None
    data["total_nodes"] = summary["total_nodes"]
    data["completed_nodes_count"] = summary["completed_nodes_count"]
    data["progress_percentage"] = summary["progress_percentage"]
    return data


# ================= READ =================

@router.get("")
async def list_progress(
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(get_current_user),
):
    summaries = await progress_service.list_user_progress(db, current_user.user_id)
    return ok([summary_data(s) for s in summaries])


@router.get("/stats")
async def get_stats(
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(get_current_user),
):
    stats = await progress_service.get_user_stats(db, current_user.user_id)
    return ok(ProgressStats(**stats).model_dump())


@router.get("/{path_id}")
async def get_path_progress(
    path_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(get_current_user),
):
    summary = await progress_service.get_path_progress(db, current_user.user_id, path_id)
    return ok(summary_data(summary))


# ================= LIFECYCLE =================

@router.post("/start", status_code=status.HTTP_201_CREATED)
async def start_progress(
    data: StartProgressRequest,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(get_current_user),
):
    record = await progress_service.start_progress(db, current_user.user_id, data.path_id)
    return ok(record_data(record), "Progress started")


@router.post("/{path_id}/complete")
async def complete_node(
    path_id: int,
    data: CompleteNodeRequest,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(get_current_user),
):
    record = await progress_service.complete_node(db, current_user.user_id, path_id, data.node_id)
    return ok(record_data(record), "Node completed")


@router.post("/{path_id}/reset")
async def reset_progress(
    path_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(get_current_user),
):
    record = await progress_service.reset_progress(db, current_user.user_id, path_id)
    return ok(record_data(record), "Progress reset")


@router.delete("/{path_id}")
async def abandon_progress(
    path_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(get_current_user),
):
    await progress_service.abandon_progress(db, current_user.user_id, path_id)
    return ok(message="Progress abandoned")
