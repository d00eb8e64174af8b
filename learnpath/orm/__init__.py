from .base import Base

# Core models
from .user import User, UserRole
from .category import Category
from .learning_path import LearningPath, Difficulty
from .content import Content, ContentType
from .question import Question
from .node import Node
from .user_progress import UserProgress, ProgressStatus


__all__ = [
    "Base",
    "User",
    "UserRole",
    "Category",
    "LearningPath",
    "Difficulty",
    "Content",
    "ContentType",
    "Question",
    "Node",
    "UserProgress",
    "ProgressStatus",
]
