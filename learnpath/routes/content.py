"""
learnpath/routes/content.py
Content routes

POST /content/{id} is a partial update. Sending `questions` replaces the
entire question bank of a QUIZ (an empty list removes every question).
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnpath.database import get_db
from learnpath.orm.content import Content, ContentType
from learnpath.rbac import ADMIN_ONLY, STAFF_ROLES, AuthUser, require_role
from learnpath.schemas.common import ok
from learnpath.schemas.content import ContentCreate, ContentDetail, ContentNodeRef, ContentUpdate, ContentWithNodes
from learnpath.services import content_service

router = APIRouter(prefix="/content", tags=["Content"])


def content_data(content: Content) -> dict:
    return ContentDetail.model_validate(content).model_dump(mode="json")


@router.get("")
async def list_content(
    type: Optional[ContentType] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    contents = await content_service.list_content(db, type)
    return ok([content_data(c) for c in contents])


@router.get("/{content_id}")
async def get_content(content_id: int, db: AsyncSession = Depends(get_db)):
    content, nodes = await content_service.get_content_detail(db, content_id)
    result = ContentWithNodes(
        **ContentDetail.model_validate(content).model_dump(),
        nodes=[ContentNodeRef.model_validate(n) for n in nodes],
    )
    return ok(result.model_dump(mode="json"))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_content(
    data: ContentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(require_role(STAFF_ROLES)),
):
    content = await content_service.create_content(db, data)
    return ok(content_data(content), "Content created")


@router.post("/{content_id}")
@router.put("/{content_id}", include_in_schema=False)
async def update_content(
    content_id: int,
    data: ContentUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(require_role(STAFF_ROLES)),
):
    content = await content_service.update_content(db, content_id, data)
    return ok(content_data(content), "Content updated")


@router.delete("/{content_id}")
async def delete_content(
    content_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(require_role(ADMIN_ONLY)),
):
    await content_service.delete_content(db, content_id)
    return ok(message="Content deleted")
