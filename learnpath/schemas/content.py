"""
learnpath/schemas/content.py
Content and question request/response schemas

Type-specific payload rules (VIDEO needs video_url, ARTICLE needs
article_text, questions only on QUIZ) are enforced here on create and in
the content service on update, where the effective type is known.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from learnpath.orm.content import ContentType


# ================= QUESTION SCHEMAS =================

class QuestionFields(BaseModel):
    """Question body shared by standalone create and inline content questions"""
    question: str = Field(..., min_length=5)
    options: List[str] = Field(..., min_length=2)
    correct_answer: int = Field(..., ge=0)
    explanation: Optional[str] = None

    @model_validator(mode="after")
    def answer_in_range(self):
        if self.correct_answer >= len(self.options):
            raise ValueError("correct_answer must be a valid index into options")
        return self


class QuestionCreate(QuestionFields):
    """Used by: POST /api/questions"""
    content_id: int = Field(..., gt=0)


class QuestionUpdate(BaseModel):
    """
    Partial update. content_id cannot change.
    When only one of options/correct_answer is sent, the range check
    happens in the service against the stored counterpart.
    """
    model_config = ConfigDict(extra="forbid")

    question: Optional[str] = Field(None, min_length=5)
    options: Optional[List[str]] = Field(None, min_length=2)
    correct_answer: Optional[int] = Field(None, ge=0)
    explanation: Optional[str] = None

    @field_validator("question", "options", "correct_answer")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("cannot be null")
        return v


class QuestionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    content_id: int
    question: str
    options: List[str]
    correct_answer: int
    explanation: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CheckAnswerRequest(BaseModel):
    """Used by: POST /api/questions/{id}/check"""
    user_answer: int = Field(..., ge=0)


class CheckAnswerResponse(BaseModel):
    is_correct: bool
    correct_answer: int
    explanation: Optional[str] = None


# ================= CONTENT SCHEMAS =================

class ContentCreate(BaseModel):
    """Used by: POST /api/content"""
    type: ContentType
    title: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = None
    video_url: Optional[str] = Field(None, max_length=500)
    duration: Optional[int] = Field(None, gt=0, description="Length in seconds")
    article_text: Optional[str] = None
    questions: Optional[List[QuestionFields]] = None

    @model_validator(mode="after")
    def payload_matches_type(self):
        if self.type == ContentType.VIDEO and not self.video_url:
            raise ValueError("video_url is required for VIDEO content")
        if self.type == ContentType.ARTICLE and not self.article_text:
            raise ValueError("article_text is required for ARTICLE content")
        if self.questions and self.type != ContentType.QUIZ:
            raise ValueError("questions are only allowed on QUIZ content")
        return self

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "type": "QUIZ",
                "title": "HTML basics quiz",
                "questions": [
                    {"question": "What does HTML stand for?", "options": ["HyperText Markup Language", "Hot Mail"], "correct_answer": 0}
                ],
            }
        }
    )


class ContentUpdate(BaseModel):
    """
    Partial update. A present `questions` list replaces the whole question
    bank; an empty list removes every question.
    """
    type: Optional[ContentType] = None
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = None
    video_url: Optional[str] = Field(None, max_length=500)
    duration: Optional[int] = Field(None, gt=0)
    article_text: Optional[str] = None
    questions: Optional[List[QuestionFields]] = None

    @field_validator("type", "title")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("cannot be null")
        return v


class ContentNodeRef(BaseModel):
    """Node that points at a content"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    path_id: int


class ContentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: ContentType
    title: str
    description: Optional[str] = None
    video_url: Optional[str] = None
    duration: Optional[int] = None
    article_text: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ContentDetail(ContentResponse):
    questions: List[QuestionResponse] = Field(default_factory=list)


class ContentWithNodes(ContentDetail):
    nodes: List[ContentNodeRef] = Field(default_factory=list)
