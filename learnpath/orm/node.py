"""
learnpath/orm/node.py
Node - one entry in a path's outline

Nodes form a forest per path through the self-referential parent_id.
A node with children is a container; a leaf usually points at one Content.
The tree is rebuilt in memory on read (see services/node_tree.py).
"""
from sqlalchemy import Column, Integer, String, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from learnpath.orm.base import BaseModel


class Node(BaseModel):
    """
    Fields:
    - path_id: owning path (cascade on path delete)
    - parent_id: parent node in the same path, NULL for roots
    - content_id: optional lesson payload (set NULL when content is deleted)
    - order: sort key among siblings only, not unique
    """
    __tablename__ = "nodes"

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)

    order = Column("order", Integer, nullable=False, default=0)

    path_id = Column(
        Integer,
        ForeignKey("learning_paths.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    parent_id = Column(
        Integer,
        ForeignKey("nodes.id", ondelete="CASCADE"),
        nullable=True,
        index=True
    )

    content_id = Column(
        Integer,
        ForeignKey("contents.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    content = relationship("Content", lazy="joined")

    __table_args__ = (
        Index("ix_nodes_path_parent_order", "path_id", "parent_id", "order"),
    )

    def __repr__(self):
        return f"<Node(id={self.id}, path_id={self.path_id}, parent_id={self.parent_id})>"
