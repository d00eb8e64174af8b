"""
learnpath/orm/category.py
Category - flat reference data grouping learning paths
"""
from sqlalchemy import Column, String, Text
from learnpath.orm.base import BaseModel


class Category(BaseModel):
    __tablename__ = "categories"

    name = Column(String(100), nullable=False)
    slug = Column(String(120), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)

    def __repr__(self):
        return f"<Category(id={self.id}, slug='{self.slug}')>"
