"""
learnpath/orm/content.py
Content - polymorphic lesson payload (video / article / quiz / exercise)

Only the payload fields relevant to `type` are meaningful; the rest are
stored as NULL. Quiz content owns a bank of Question rows.
"""
from sqlalchemy import Column, Integer, String, Text, Enum as SQLEnum
from sqlalchemy.orm import relationship
from enum import Enum
from learnpath.orm.base import BaseModel


class ContentType(str, Enum):
    VIDEO = "VIDEO"
    ARTICLE = "ARTICLE"
    QUIZ = "QUIZ"
    EXERCISE = "EXERCISE"


# Payload columns that carry type-specific data
PAYLOAD_FIELDS = ("video_url", "duration", "article_text")

# Which payload columns each type keeps
TYPE_FIELDS = {
    ContentType.VIDEO: {"video_url", "duration"},
    ContentType.ARTICLE: {"article_text"},
    ContentType.EXERCISE: {"article_text"},
    ContentType.QUIZ: set(),
}


class Content(BaseModel):
    """
    Fields:
    - type: VIDEO | ARTICLE | QUIZ | EXERCISE
    - video_url, duration (seconds): VIDEO only
    - article_text: ARTICLE body or EXERCISE instructions
    - questions: QUIZ only, cascade-deleted with the content
    """
    __tablename__ = "contents"

    type = Column(SQLEnum(ContentType), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)

    video_url = Column(String(500), nullable=True)
    duration = Column(Integer, nullable=True)
    article_text = Column(Text, nullable=True)

    questions = relationship(
        "Question",
        back_populates="content",
        cascade="all, delete-orphan",
        order_by="Question.id",
        lazy="selectin"
    )

    def __repr__(self):
        return f"<Content(id={self.id}, type={self.type})>"

    @staticmethod
    def relevant_fields(content_type: ContentType) -> set:
        return TYPE_FIELDS[ContentType(content_type)]

    def clear_irrelevant_fields(self) -> None:
        """Null every payload column the current type does not use."""
        keep = self.relevant_fields(self.type)
        for field in PAYLOAD_FIELDS:
            if field not in keep:
                setattr(self, field, None)
