"""
learnpath/services/progress_service.py
Progress tracker: per-user, per-path completion state

STATE MACHINE (per user, path):
    NOT_STARTED --start--> IN_PROGRESS --complete all--> COMPLETED
    IN_PROGRESS/COMPLETED --reset--> IN_PROGRESS (record kept, zeroed)
    any --abandon--> NOT_STARTED (record deleted)

RULES:
- start is idempotent: an existing record is returned unchanged
- completing an already completed node is a no-op
- completed_at is set iff completed_nodes covers every node of the path
  at the last recompute
- progress_percentage = round(100 * completed / total), 0 for empty paths

Mutations are read-then-write without a spanning lock; concurrent
completions for the same record are last-write-wins.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from learnpath.errors import ErrorCode, NotFoundError
from learnpath.orm.base import utcnow
from learnpath.orm.learning_path import LearningPath
from learnpath.orm.node import Node
from learnpath.orm.user_progress import UserProgress
from learnpath.services import path_service
from learnpath.services.common import commit_or_raise, percentage

logger = logging.getLogger(__name__)


# ================= HELPERS =================

async def _get_record(db: AsyncSession, user_id: int, path_id: int) -> Optional[UserProgress]:
    result = await db.execute(
        select(UserProgress).where(
            UserProgress.user_id == user_id,
            UserProgress.path_id == path_id,
        )
    )
    return result.scalar_one_or_none()


async def _require_record(db: AsyncSession, user_id: int, path_id: int, hint: str = "") -> UserProgress:
    record = await _get_record(db, user_id, path_id)
    if record is None:
        message = f"No progress record for path {path_id}"
        if hint:
            message = f"{message}. {hint}"
        raise NotFoundError("Progress", code=ErrorCode.PROGRESS_NOT_FOUND, message=message)
    return record


async def _first_node_id(db: AsyncSession, path_id: int) -> Optional[int]:
    """Lowest-order node of the path, ties broken by id."""
    result = await db.execute(
        select(Node.id)
        .where(Node.path_id == path_id)
        .order_by(Node.order.asc(), Node.id.asc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def _count_nodes(db: AsyncSession, path_id: int) -> int:
    result = await db.execute(select(func.count(Node.id)).where(Node.path_id == path_id))
    return result.scalar() or 0


async def _reload(db: AsyncSession, record_id: int) -> UserProgress:
    result = await db.execute(
        select(UserProgress)
        .where(UserProgress.id == record_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


# ================= LIFECYCLE =================

async def start_progress(db: AsyncSession, user_id: int, path_id: int) -> UserProgress:
    """Create the record, or return the existing one unchanged."""
    await path_service.get_path(db, path_id)

    existing = await _get_record(db, user_id, path_id)
    if existing is not None:
        logger.info(f"Progress already started: user={user_id} path={path_id}")
        return existing

    record = UserProgress(
        user_id=user_id,
        path_id=path_id,
        completed_nodes=[],
        current_node_id=await _first_node_id(db, path_id),
    )
    db.add(record)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent start for the same pair
        await db.rollback()
        existing = await _get_record(db, user_id, path_id)
        if existing is None:
            raise
        return existing

    logger.info(f"Progress started: user={user_id} path={path_id} current_node={record.current_node_id}")
    return await _reload(db, record.id)


async def complete_node(db: AsyncSession, user_id: int, path_id: int, node_id: int) -> UserProgress:
    """
    Mark a node complete and advance the cursor to the first node whose
    order is strictly greater than the completed node's.
    """
    record = await _require_record(db, user_id, path_id, hint="Start the path before completing nodes")

    node = await db.get(Node, node_id)
    if node is None or node.path_id != path_id:
        raise NotFoundError(
            "Node", node_id, code=ErrorCode.NODE_NOT_FOUND,
            message=f"Node {node_id} is not part of path {path_id}",
        )

    completed = list(record.completed_nodes or [])
    if record.has_completed(node_id):
        return record

    completed.append(node_id)

    next_node_id = (await db.execute(
        select(Node.id)
        .where(Node.path_id == path_id, Node.order > node.order)
        .order_by(Node.order.asc(), Node.id.asc())
        .limit(1)
    )).scalar_one_or_none()

    total = await _count_nodes(db, path_id)

    record.completed_nodes = completed
    if next_node_id is not None:
        record.current_node_id = next_node_id
    record.completed_at = utcnow() if len(completed) >= total else None

    await commit_or_raise(db)
    logger.info(
        f"Node completed: user={user_id} path={path_id} node={node_id} "
        f"({len(completed)}/{total}) current_node={record.current_node_id}"
    )
    return await _reload(db, record.id)


async def reset_progress(db: AsyncSession, user_id: int, path_id: int) -> UserProgress:
    """Zero the record but keep it."""
    record = await _require_record(db, user_id, path_id)

    record.completed_nodes = []
    record.current_node_id = await _first_node_id(db, path_id)
    record.completed_at = None

    await commit_or_raise(db)
    logger.info(f"Progress reset: user={user_id} path={path_id}")
    return await _reload(db, record.id)


async def abandon_progress(db: AsyncSession, user_id: int, path_id: int) -> None:
    """Delete the record outright, returning the pair to NOT_STARTED."""
    record = await _require_record(db, user_id, path_id)
    await db.delete(record)
    await commit_or_raise(db)
    logger.info(f"Progress abandoned: user={user_id} path={path_id}")


# ================= READS =================

def _summary(record: UserProgress, path: Optional[LearningPath], total: int) -> Dict[str, Any]:
    completed_count = len(record.completed_nodes or [])
    return {
        "record": record,
        "path": path,
        "total_nodes": total,
        "completed_nodes_count": completed_count,
        "progress_percentage": percentage(completed_count, total),
    }


async def get_path_progress(db: AsyncSession, user_id: int, path_id: int) -> Dict[str, Any]:
    """Record plus computed counts; touches last_accessed_at."""
    record = await _require_record(db, user_id, path_id)

    record.last_accessed_at = utcnow()
    await commit_or_raise(db)

    record = await _reload(db, record.id)
    path = await path_service.get_path(db, path_id)
    total = await _count_nodes(db, path_id)
    return _summary(record, path, total)


async def list_user_progress(db: AsyncSession, user_id: int) -> List[Dict[str, Any]]:
    """Every record of the user, most recently accessed first."""
    result = await db.execute(
        select(UserProgress)
        .where(UserProgress.user_id == user_id)
        .order_by(UserProgress.last_accessed_at.desc(), UserProgress.id.desc())
    )
    records = list(result.scalars().all())
    if not records:
        return []

    path_ids = [r.path_id for r in records]
    paths_result = await db.execute(select(LearningPath).where(LearningPath.id.in_(path_ids)))
    paths = {p.id: p for p in paths_result.scalars().all()}
    counts = await path_service.node_counts(db, path_ids)

    return [_summary(r, paths.get(r.path_id), counts.get(r.path_id, 0)) for r in records]


async def get_user_stats(db: AsyncSession, user_id: int) -> Dict[str, int]:
    result = await db.execute(select(UserProgress).where(UserProgress.user_id == user_id))
    records = list(result.scalars().all())

    counts = await path_service.node_counts(db, [r.path_id for r in records])

    total_paths = len(records)
    completed_paths = sum(1 for r in records if r.completed_at is not None)
    total_nodes = sum(counts.get(r.path_id, 0) for r in records)
    completed_nodes = sum(len(r.completed_nodes or []) for r in records)

    return {
        "total_paths": total_paths,
        "completed_paths": completed_paths,
        "in_progress_paths": total_paths - completed_paths,
        "total_nodes": total_nodes,
        "completed_nodes": completed_nodes,
        "overall_progress": percentage(completed_nodes, total_nodes),
    }


# ================= NODE DELETION =================

async def scrub_deleted_nodes(db: AsyncSession, path_id: int, deleted_ids: Iterable[int]) -> int:
    """
    Remove soon-to-be-deleted node ids from every progress record of the
    path, repair the cursor and recompute completion. Flushes, does not
    commit; the caller deletes the nodes in the same transaction.
    Returns the number of records changed.
    """
    deleted = set(deleted_ids)

    result = await db.execute(select(UserProgress).where(UserProgress.path_id == path_id))
    records = list(result.scalars().all())
    if not records:
        return 0

    remaining_result = await db.execute(
        select(Node.id)
        .where(Node.path_id == path_id, Node.id.notin_(deleted))
        .order_by(Node.order.asc(), Node.id.asc())
    )
    remaining = list(remaining_result.scalars().all())
    total = len(remaining)
    first_remaining = remaining[0] if remaining else None

    changed = 0
    for record in records:
        before = list(record.completed_nodes or [])
        kept = [node_id for node_id in before if node_id not in deleted]
        cursor_gone = record.current_node_id in deleted
        is_complete = len(kept) >= total

        if kept == before and not cursor_gone and is_complete == (record.completed_at is not None):
            continue

        record.completed_nodes = kept
        if cursor_gone:
            record.current_node_id = first_remaining
        if is_complete:
            record.completed_at = record.completed_at or utcnow()
        else:
            record.completed_at = None
        changed += 1

    if changed:
        await db.flush()
        logger.info(f"Scrubbed deleted nodes {sorted(deleted)} from {changed} progress record(s) of path {path_id}")
    return changed
