"""
learnpath/orm/user_progress.py
UserProgress - one user's advancement through one learning path

State machine per (user, path):
    NOT_STARTED (no row) → IN_PROGRESS → COMPLETED
    IN_PROGRESS/COMPLETED --reset--> IN_PROGRESS (row kept, zeroed)
    any --abandon--> NOT_STARTED (row deleted)
"""
from sqlalchemy import Column, Integer, DateTime, ForeignKey, JSON, UniqueConstraint
from enum import Enum
from learnpath.orm.base import Base, utcnow


class ProgressStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class UserProgress(Base):
    """
    Tracks which nodes of a path a user has completed.

    completed_nodes is a flat JSON list of node ids with set semantics;
    containers and leaves are not distinguished. completed_at is set iff
    the list covered every node of the path at the last recompute.
    """
    __tablename__ = "user_progress"

    id = Column(Integer, primary_key=True, index=True)

    # Foreign Keys (no cascade: deleting a referenced user/path is refused)
    user_id = Column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        index=True
    )

    path_id = Column(
        Integer,
        ForeignKey("learning_paths.id"),
        nullable=False,
        index=True
    )

    completed_nodes = Column(JSON, nullable=False, default=list)

    current_node_id = Column(
        Integer,
        ForeignKey("nodes.id", ondelete="SET NULL"),
        nullable=True
    )

    started_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    last_accessed_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "path_id", name="uq_user_path_progress"),
    )

    def __repr__(self):
        return f"<UserProgress(user_id={self.user_id}, path_id={self.path_id})>"

    @property
    def status(self) -> ProgressStatus:
        if self.completed_at is not None:
            return ProgressStatus.COMPLETED
        return ProgressStatus.IN_PROGRESS

    def has_completed(self, node_id: int) -> bool:
        return node_id in (self.completed_nodes or [])
