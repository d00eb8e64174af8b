"""
learnpath/routes/categories.py
Category routes: any authenticated user reads, ADMIN creates
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnpath.database import get_db
from learnpath.rbac import ADMIN_ONLY, AuthUser, get_current_user, require_role
from learnpath.schemas.category import CategoryCreate, CategoryDetail, CategoryPathItem, CategoryResponse
from learnpath.schemas.common import ok
from learnpath.services import category_service

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("")
async def list_categories(
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(get_current_user),
):
    categories = await category_service.list_categories(db)
    return ok([CategoryResponse.model_validate(c).model_dump(mode="json") for c in categories])


@router.get("/{category_id}")
async def get_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(get_current_user),
):
    category, paths = await category_service.get_category(db, category_id)
    detail = CategoryDetail(
        **CategoryResponse.model_validate(category).model_dump(),
        paths=[CategoryPathItem.model_validate(p) for p in paths],
    )
    return ok(detail.model_dump(mode="json"))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(
    data: CategoryCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(require_role(ADMIN_ONLY)),
):
    category = await category_service.create_category(db, data)
    return ok(CategoryResponse.model_validate(category).model_dump(mode="json"), "Category created")
