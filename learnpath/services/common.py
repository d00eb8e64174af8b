"""
learnpath/services/common.py
Helpers shared by the service modules
"""
import logging
from typing import Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from learnpath.errors import NotFoundError, ErrorCode, translate_integrity_error

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


async def commit_or_raise(
    db: AsyncSession,
    conflict_message: str = "This record already exists",
    constraint_message: str = "This record is referenced by other data and cannot be changed",
) -> None:
    """
    Commit the session, translating integrity failures into API errors.
    The session is rolled back before raising.
    """
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        error = translate_integrity_error(e, conflict_message, constraint_message)
        logger.warning(f"Commit rejected ({error.code}): {error.message}")
        raise error from e


async def get_or_404(
    db: AsyncSession,
    model: Type[ModelT],
    obj_id: int,
    resource: str,
    code: str = ErrorCode.NOT_FOUND,
    populate_existing: bool = False,
) -> ModelT:
    """Fetch a row by primary key or raise NotFoundError."""
    obj: Optional[ModelT] = await db.get(model, obj_id, populate_existing=populate_existing)
    if obj is None:
        raise NotFoundError(resource, obj_id, code=code)
    return obj


def percentage(completed: int, total: int) -> int:
    """round(100 * completed / total), 0 when total is 0."""
    if total <= 0:
        return 0
    return round(100 * completed / total)
