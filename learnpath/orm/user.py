"""
learnpath/orm/user.py
User model with role-based access
"""
from sqlalchemy import Column, String, Enum as SQLEnum
from enum import Enum
from learnpath.orm.base import BaseModel


class UserRole(str, Enum):
    """
    Platform roles.

    - STUDENT: follows paths, tracks own progress
    - TEACHER: authors paths, nodes, content and questions
    - ADMIN: everything, including destructive deletes and account management
    """
    STUDENT = "STUDENT"
    TEACHER = "TEACHER"
    ADMIN = "ADMIN"


class User(BaseModel):
    """
    Platform account.

    Progress records reference users without cascade, so deleting a user
    who has started a path is refused by the database.
    """
    __tablename__ = "users"

    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(200), nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.STUDENT, index=True)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role={self.role})>"

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value if self.role else None,
            "created_at": self.created_at,
        }
