"""
learnpath/services/node_service.py
Node tree store: path-scoped outline of lessons

Write-time guards:
- a parent must exist and belong to the same path
- re-parenting must not make a node its own ancestor
- path_id never changes after creation
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from learnpath.errors import ErrorCode, NotFoundError, ValidationError
from learnpath.orm.content import Content
from learnpath.orm.node import Node
from learnpath.schemas.common import ReorderItem
from learnpath.schemas.node import ContentSummary, NodeCreate, NodeUpdate
from learnpath.services import path_service, progress_service
from learnpath.services.common import commit_or_raise, get_or_404
from learnpath.services.node_tree import build_node_tree, collect_subtree_ids, would_create_cycle

logger = logging.getLogger(__name__)


async def _path_nodes(db: AsyncSession, path_id: int) -> List[Node]:
    result = await db.execute(
        select(Node).where(Node.path_id == path_id).order_by(Node.order.asc(), Node.id.asc())
    )
    return list(result.scalars().all())


async def get_node(db: AsyncSession, node_id: int, populate_existing: bool = False) -> Node:
    return await get_or_404(
        db, Node, node_id, "Node", code=ErrorCode.NODE_NOT_FOUND, populate_existing=populate_existing
    )


async def list_nodes(db: AsyncSession, path_id: int) -> List[Node]:
    """Flat list ordered by (order, id)."""
    await path_service.get_path(db, path_id)
    return await _path_nodes(db, path_id)


async def get_node_detail(db: AsyncSession, node_id: int) -> Dict[str, Any]:
    """Node with content (and questions), ordered children and parent."""
    node = await get_node(db, node_id)

    result = await db.execute(
        select(Node).where(Node.parent_id == node_id).order_by(Node.order.asc(), Node.id.asc())
    )
    children = list(result.scalars().all())
    parent = await db.get(Node, node.parent_id) if node.parent_id else None

    return {"node": node, "parent": parent, "children": children}


def _tree_item(node: Node) -> Dict[str, Any]:
    return {
        "id": node.id,
        "title": node.title,
        "description": node.description,
        "order": node.order,
        "path_id": node.path_id,
        "parent_id": node.parent_id,
        "content_id": node.content_id,
        "content": (
            ContentSummary.model_validate(node.content).model_dump(mode="json")
            if node.content is not None else None
        ),
    }


async def get_tree(db: AsyncSession, path_id: int) -> List[Dict[str, Any]]:
    """
    Forest of the path's nodes with nested, sorted children.

    Nodes not reachable from a root (dangling or cyclic parent chains)
    are left out and logged.
    """
    await path_service.get_path(db, path_id)
    nodes = await _path_nodes(db, path_id)

    tree = build_node_tree(nodes, _tree_item)
    if tree.excluded_ids:
        logger.warning(
            f"Path {path_id}: {len(tree.excluded_ids)} node(s) unreachable from a root "
            f"were excluded from the tree: {tree.excluded_ids}"
        )
    return tree.roots


async def _validate_parent(db: AsyncSession, path_id: int, parent_id: int) -> Node:
    parent = await db.get(Node, parent_id)
    if parent is None:
        raise ValidationError(f"Parent node {parent_id} does not exist", field="parent_id")
    if parent.path_id != path_id:
        raise ValidationError(
            f"Parent node {parent_id} belongs to path {parent.path_id}, not {path_id}",
            field="parent_id",
        )
    return parent


async def _validate_content(db: AsyncSession, content_id: int) -> None:
    await get_or_404(db, Content, content_id, "Content", code=ErrorCode.CONTENT_NOT_FOUND)


async def create_node(db: AsyncSession, data: NodeCreate) -> Node:
    await path_service.get_path(db, data.path_id)
    if data.content_id is not None:
        await _validate_content(db, data.content_id)
    if data.parent_id is not None:
        await _validate_parent(db, data.path_id, data.parent_id)

    node = Node(**data.model_dump())
    db.add(node)
    await commit_or_raise(db)

    logger.info(f"Node created: id={node.id} path_id={node.path_id} parent_id={node.parent_id}")
    return await get_node(db, node.id, populate_existing=True)


async def update_node(db: AsyncSession, node_id: int, data: NodeUpdate) -> Node:
    node = await get_node(db, node_id)
    fields = data.model_dump(exclude_unset=True)

    if fields.get("content_id") is not None:
        await _validate_content(db, fields["content_id"])

    new_parent_id: Optional[int] = fields.get("parent_id")
    if new_parent_id is not None and new_parent_id != node.parent_id:
        await _validate_parent(db, node.path_id, new_parent_id)
        siblings = await _path_nodes(db, node.path_id)
        if would_create_cycle(siblings, node.id, new_parent_id):
            raise ValidationError(
                f"Node {new_parent_id} is node {node.id} or one of its descendants",
                code=ErrorCode.TREE_INVALID,
                field="parent_id",
            )

    for key, value in fields.items():
        setattr(node, key, value)

    await commit_or_raise(db)
    logger.info(f"Node updated: id={node_id} fields={sorted(fields)}")
    return await get_node(db, node_id, populate_existing=True)


async def reorder_nodes(db: AsyncSession, updates: List[ReorderItem]) -> int:
    """Apply every {id, order} pair in one transaction; unknown ids abort it."""
    ids = {item.id for item in updates}
    result = await db.execute(select(Node).where(Node.id.in_(ids)))
    nodes = {node.id: node for node in result.scalars().all()}

    missing = sorted(ids - nodes.keys())
    if missing:
        await db.rollback()
        raise NotFoundError("Node", missing[0], code=ErrorCode.NODE_NOT_FOUND)

    for item in updates:
        nodes[item.id].order = item.order

    await commit_or_raise(db)
    logger.info(f"Reordered {len(updates)} nodes")
    return len(updates)


async def delete_node(db: AsyncSession, node_id: int) -> List[int]:
    """
    Delete a node and its whole subtree, then scrub the removed ids from
    every progress record of the path. Returns the deleted ids.
    """
    node = await get_node(db, node_id)
    path_id = node.path_id

    nodes = await _path_nodes(db, path_id)
    deleted_ids = collect_subtree_ids(nodes, node_id)

    await progress_service.scrub_deleted_nodes(db, path_id, deleted_ids)
    await db.execute(delete(Node).where(Node.id.in_(deleted_ids)))
    await commit_or_raise(db)

    logger.info(f"Node deleted: id={node_id} path_id={path_id} removed={deleted_ids}")
    return deleted_ids
