"""
learnpath/routes/nodes.py
Node routes: flat list, tree and single reads are public;
TEACHER/ADMIN create, update and reorder; ADMIN deletes.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnpath.database import get_db
from learnpath.orm.node import Node
from learnpath.rbac import ADMIN_ONLY, STAFF_ROLES, AuthUser, require_role
from learnpath.schemas.common import ReorderRequest, ok
from learnpath.schemas.content import ContentDetail
from learnpath.schemas.node import NodeCreate, NodeDetail, NodeListItem, NodeResponse, NodeUpdate, TreeNode
from learnpath.services import node_service

router = APIRouter(prefix="/nodes", tags=["Nodes"])


def node_data(node: Node) -> dict:
    return NodeListItem.model_validate(node).model_dump(mode="json")


# ================= READ =================

@router.get("")
async def list_nodes(path_id: int = Query(..., gt=0), db: AsyncSession = Depends(get_db)):
    """Flat list of the path's nodes ordered by (order, id)."""
    nodes = await node_service.list_nodes(db, path_id)
    return ok([node_data(n) for n in nodes])


@router.get("/tree")
async def get_tree(path_id: int = Query(..., gt=0), db: AsyncSession = Depends(get_db)):
    """Forest of root nodes with nested `children`, siblings sorted by order."""
    roots = await node_service.get_tree(db, path_id)
    return ok([TreeNode.model_validate(root).model_dump(mode="json") for root in roots])


@router.get("/{node_id}")
async def get_node(node_id: int, db: AsyncSession = Depends(get_db)):
    detail = await node_service.get_node_detail(db, node_id)
    node = detail["node"]
    parent = detail["parent"]
    result = NodeDetail(
        **NodeResponse.model_validate(node).model_dump(),
        content=ContentDetail.model_validate(node.content) if node.content is not None else None,
        parent=NodeResponse.model_validate(parent) if parent is not None else None,
        children=[NodeListItem.model_validate(child) for child in detail["children"]],
    )
    return ok(result.model_dump(mode="json"))


# ================= MANAGE =================

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_node(
    data: NodeCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(require_role(STAFF_ROLES)),
):
    node = await node_service.create_node(db, data)
    return ok(node_data(node), "Node created")


@router.post("/reorder")
async def reorder_nodes(
    data: ReorderRequest,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(require_role(STAFF_ROLES)),
):
    count = await node_service.reorder_nodes(db, data.updates)
    return ok({"updated": count}, "Nodes reordered")


@router.put("/{node_id}")
async def update_node(
    node_id: int,
    data: NodeUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(require_role(STAFF_ROLES)),
):
    node = await node_service.update_node(db, node_id, data)
    return ok(node_data(node), "Node updated")


@router.delete("/{node_id}")
async def delete_node(
    node_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(require_role(ADMIN_ONLY)),
):
    """Deletes the node with its subtree and scrubs the ids from progress records."""
    deleted_ids = await node_service.delete_node(db, node_id)
    return ok({"deleted_ids": deleted_ids}, "Node deleted")
