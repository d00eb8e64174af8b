"""
learnpath/orm/question.py
Question - one multiple-choice item in a QUIZ content's question bank
"""
from sqlalchemy import Column, Integer, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship
from learnpath.orm.base import BaseModel


class Question(BaseModel):
    """
    Fields:
    - content_id: owning QUIZ content (cascade delete)
    - options: ordered list of answer strings
    - correct_answer: index into options
    - explanation: shown after the answer is checked
    """
    __tablename__ = "questions"

    content_id = Column(
        Integer,
        ForeignKey("contents.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    question = Column(Text, nullable=False)
    options = Column(JSON, nullable=False, default=list)
    correct_answer = Column(Integer, nullable=False)
    explanation = Column(Text, nullable=True)

    content = relationship("Content", back_populates="questions")

    def __repr__(self):
        return f"<Question(id={self.id}, content_id={self.content_id})>"

    def is_correct(self, user_answer: int) -> bool:
        return self.correct_answer == user_answer
