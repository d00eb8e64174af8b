"""
learnpath/orm/learning_path.py
LearningPath - the top-level enrollable course

Structure: Category → LearningPath → Node tree → Content
"""
from sqlalchemy import Column, Integer, String, Text, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from enum import Enum
from learnpath.orm.base import BaseModel


class Difficulty(str, Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"


class LearningPath(BaseModel):
    """
    A categorized course made of a node outline.

    Fields:
    - category_id: owning category (deletion restricted while paths exist)
    - difficulty: optional level
    - order: manual sort key across all paths (new paths go last)

    Deleting a path cascades to its nodes at the database level but is
    refused while any progress record references it.
    """
    __tablename__ = "learning_paths"

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)

    category_id = Column(
        Integer,
        ForeignKey("categories.id"),
        nullable=False,
        index=True,
        comment="Reference to categories table"
    )

    difficulty = Column(SQLEnum(Difficulty), nullable=True, index=True)

    order = Column(
        "order",
        Integer,
        nullable=False,
        default=0,
        comment="Display order in listings (lower = first)"
    )

    category = relationship("Category", lazy="joined")

    def __repr__(self):
        return f"<LearningPath(id={self.id}, title='{self.title}')>"
