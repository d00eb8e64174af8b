"""
learnpath/services/category_service.py
Category registry: flat reference data grouping learning paths
"""
import logging
from typing import List, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from learnpath.errors import ConflictError, ErrorCode
from learnpath.orm.category import Category
from learnpath.orm.learning_path import LearningPath
from learnpath.schemas.category import CategoryCreate
from learnpath.services.common import commit_or_raise, get_or_404

logger = logging.getLogger(__name__)


async def list_categories(db: AsyncSession) -> List[Category]:
    result = await db.execute(select(Category).order_by(Category.name.asc(), Category.id.asc()))
    return list(result.scalars().all())


async def get_category(db: AsyncSession, category_id: int) -> Tuple[Category, List[LearningPath]]:
    """Category plus its paths in display order."""
    category = await get_or_404(db, Category, category_id, "Category", code=ErrorCode.CATEGORY_NOT_FOUND)

    result = await db.execute(
        select(LearningPath)
        .where(LearningPath.category_id == category_id)
        .order_by(LearningPath.order.asc(), LearningPath.created_at.desc(), LearningPath.id.desc())
    )
    return category, list(result.scalars().all())


async def create_category(db: AsyncSession, data: CategoryCreate) -> Category:
    existing = await db.execute(select(Category.id).where(Category.slug == data.slug))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(f"Category slug '{data.slug}' already exists", code=ErrorCode.DUPLICATE_SLUG)

    category = Category(name=data.name, slug=data.slug, description=data.description)
    db.add(category)
    await commit_or_raise(db, conflict_message=f"Category slug '{data.slug}' already exists")
    await db.refresh(category)

    logger.info(f"Category created: id={category.id} slug={category.slug}")
    return category
