"""
learnpath/routes/paths.py
Learning path routes

Public reads; TEACHER/ADMIN manage; ADMIN deletes.
Updates are accepted on both PUT and POST /path/{id}.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnpath.database import get_db
from learnpath.orm.learning_path import Difficulty, LearningPath
from learnpath.rbac import ADMIN_ONLY, STAFF_ROLES, AuthUser, require_role
from learnpath.schemas.common import ReorderRequest, ok
from learnpath.schemas.path import PathCreate, PathResponse, PathUpdate
from learnpath.services import path_service

router = APIRouter(prefix="/path", tags=["Learning Paths"])


def path_data(path: LearningPath, node_count: int) -> dict:
    return PathResponse.model_validate(path).model_copy(update={"node_count": node_count}).model_dump(mode="json")


# ================= READ =================

@router.get("")
async def list_paths(
    category_id: Optional[int] = Query(None, ge=0),
    difficulty: Optional[Difficulty] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Ordered by `order` ascending, then newest first. category_id=0 means all."""
    rows = await path_service.list_paths(db, category_id=category_id, difficulty=difficulty)
    return ok([path_data(path, count) for path, count in rows])


@router.get("/{path_id}")
async def get_path(path_id: int, db: AsyncSession = Depends(get_db)):
    path, count = await path_service.get_path_with_count(db, path_id)
    return ok(path_data(path, count))


# ================= MANAGE =================

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_path(
    data: PathCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(require_role(STAFF_ROLES)),
):
    path = await path_service.create_path(db, data)
    return ok(path_data(path, 0), "Learning path created")


@router.put("/reorder")
async def reorder_paths(
    data: ReorderRequest,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(require_role(STAFF_ROLES)),
):
    count = await path_service.reorder_paths(db, data.updates)
    return ok({"updated": count}, "Learning paths reordered")


@router.put("/{path_id}")
@router.post("/{path_id}", include_in_schema=False)
async def update_path(
    path_id: int,
    data: PathUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(require_role(STAFF_ROLES)),
):
    await path_service.update_path(db, path_id, data)
    path, count = await path_service.get_path_with_count(db, path_id)
    return ok(path_data(path, count), "Learning path updated")


@router.delete("/{path_id}")
async def delete_path(
    path_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(require_role(ADMIN_ONLY)),
):
    await path_service.delete_path(db, path_id)
    return ok(message="Learning path deleted")
