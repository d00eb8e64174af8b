"""
learnpath/services/path_service.py
Learning path registry

Paths are listed by manual `order` then newest first. Reordering is a
single transaction: an unknown id aborts the whole batch.
"""
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from learnpath.errors import ConstraintError, ErrorCode, NotFoundError
from learnpath.orm.category import Category
from learnpath.orm.learning_path import Difficulty, LearningPath
from learnpath.orm.node import Node
from learnpath.orm.user_progress import UserProgress
from learnpath.schemas.common import ReorderItem
from learnpath.schemas.path import PathCreate, PathUpdate
from learnpath.services.common import commit_or_raise, get_or_404

logger = logging.getLogger(__name__)


async def node_counts(db: AsyncSession, path_ids: Iterable[int]) -> Dict[int, int]:
    """Flat node count per path; paths without nodes map to 0."""
    path_ids = list(path_ids)
    if not path_ids:
        return {}
    result = await db.execute(
        select(Node.path_id, func.count(Node.id))
        .where(Node.path_id.in_(path_ids))
        .group_by(Node.path_id)
    )
    counts = {path_id: 0 for path_id in path_ids}
    counts.update({path_id: count for path_id, count in result.all()})
    return counts


async def list_paths(
    db: AsyncSession,
    category_id: Optional[int] = None,
    difficulty: Optional[Difficulty] = None,
) -> List[Tuple[LearningPath, int]]:
    """Paths with their node counts, filtered by category and difficulty."""
    stmt = select(LearningPath)
    if category_id:
        stmt = stmt.where(LearningPath.category_id == category_id)
    if difficulty:
        stmt = stmt.where(LearningPath.difficulty == difficulty)
    stmt = stmt.order_by(LearningPath.order.asc(), LearningPath.created_at.desc(), LearningPath.id.desc())

    result = await db.execute(stmt)
    paths = list(result.scalars().all())
    counts = await node_counts(db, [p.id for p in paths])
    return [(path, counts[path.id]) for path in paths]


async def get_path(db: AsyncSession, path_id: int, populate_existing: bool = False) -> LearningPath:
    return await get_or_404(
        db, LearningPath, path_id, "Learning path",
        code=ErrorCode.PATH_NOT_FOUND, populate_existing=populate_existing,
    )


async def get_path_with_count(db: AsyncSession, path_id: int) -> Tuple[LearningPath, int]:
    path = await get_path(db, path_id)
    counts = await node_counts(db, [path.id])
    return path, counts[path.id]


async def _ensure_category(db: AsyncSession, category_id: int) -> None:
    await get_or_404(db, Category, category_id, "Category", code=ErrorCode.CATEGORY_NOT_FOUND)


async def create_path(db: AsyncSession, data: PathCreate) -> LearningPath:
    """New paths go last unless an explicit order is given."""
    await _ensure_category(db, data.category_id)

    order = data.order
    if order is None:
        max_order = (await db.execute(select(func.max(LearningPath.order)))).scalar()
        order = (max_order or 0) + 1

    path = LearningPath(
        title=data.title,
        description=data.description,
        category_id=data.category_id,
        difficulty=data.difficulty,
        order=order,
    )
    db.add(path)
    await commit_or_raise(db)

    logger.info(f"Learning path created: id={path.id} title='{path.title}' order={order}")
    return await get_path(db, path.id, populate_existing=True)


async def update_path(db: AsyncSession, path_id: int, data: PathUpdate) -> LearningPath:
    path = await get_path(db, path_id)
    fields = data.model_dump(exclude_unset=True)

    if "category_id" in fields and fields["category_id"] != path.category_id:
        await _ensure_category(db, fields["category_id"])

    for key, value in fields.items():
        setattr(path, key, value)

    await commit_or_raise(db)
    logger.info(f"Learning path updated: id={path_id} fields={sorted(fields)}")
    return await get_path(db, path_id, populate_existing=True)


async def reorder_paths(db: AsyncSession, updates: List[ReorderItem]) -> int:
    """Apply every {id, order} pair in one transaction."""
    ids = {item.id for item in updates}
    result = await db.execute(select(LearningPath).where(LearningPath.id.in_(ids)))
    paths = {path.id: path for path in result.scalars().all()}

    missing = sorted(ids - paths.keys())
    if missing:
        await db.rollback()
        raise NotFoundError("Learning path", missing[0], code=ErrorCode.PATH_NOT_FOUND)

    for item in updates:
        paths[item.id].order = item.order

    await commit_or_raise(db)
    logger.info(f"Reordered {len(updates)} learning paths")
    return len(updates)


async def delete_path(db: AsyncSession, path_id: int) -> None:
    """
    Nodes are removed by the database cascade. Refused while any
    progress record references the path.
    """
    path = await get_path(db, path_id)

    progress_count = (await db.execute(
        select(func.count(UserProgress.id)).where(UserProgress.path_id == path_id)
    )).scalar() or 0
    if progress_count:
        raise ConstraintError(
            f"Learning path has {progress_count} progress record(s); "
            "users must abandon it before it can be deleted",
            details={"progress_records": progress_count},
        )

    await db.delete(path)
    await commit_or_raise(
        db, constraint_message="Learning path is still referenced by progress records"
    )
    logger.info(f"Learning path deleted: id={path_id}")
