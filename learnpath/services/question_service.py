"""
learnpath/services/question_service.py
Quiz question bank and answer checking
"""
import logging
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from learnpath.errors import ErrorCode, ValidationError
from learnpath.orm.content import ContentType
from learnpath.orm.question import Question
from learnpath.schemas.content import QuestionCreate, QuestionUpdate
from learnpath.services import content_service
from learnpath.services.common import commit_or_raise, get_or_404

logger = logging.getLogger(__name__)


async def get_question(db: AsyncSession, question_id: int, populate_existing: bool = False) -> Question:
    return await get_or_404(
        db, Question, question_id, "Question",
        code=ErrorCode.QUESTION_NOT_FOUND, populate_existing=populate_existing,
    )


async def list_questions(db: AsyncSession, content_id: int) -> List[Question]:
    await content_service.get_content(db, content_id)
    result = await db.execute(
        select(Question).where(Question.content_id == content_id).order_by(Question.id.asc())
    )
    return list(result.scalars().all())


async def create_question(db: AsyncSession, data: QuestionCreate) -> Question:
    content = await content_service.get_content(db, data.content_id)
    if content.type != ContentType.QUIZ:
        raise ValidationError(
            f"Questions can only be added to QUIZ content, content {content.id} is {content.type.value}",
            field="content_id",
        )

    question = Question(**data.model_dump())
    db.add(question)
    await commit_or_raise(db)

    logger.info(f"Question created: id={question.id} content_id={question.content_id}")
    return await get_question(db, question.id, populate_existing=True)


async def update_question(db: AsyncSession, question_id: int, data: QuestionUpdate) -> Question:
    question = await get_question(db, question_id)
    fields = data.model_dump(exclude_unset=True)

    options = fields.get("options", question.options)
    correct_answer = fields.get("correct_answer", question.correct_answer)
    if correct_answer >= len(options):
        raise ValidationError(
            "correct_answer must be a valid index into options", field="correct_answer"
        )

    for key, value in fields.items():
        setattr(question, key, value)

    await commit_or_raise(db)
    logger.info(f"Question updated: id={question_id} fields={sorted(fields)}")
    return await get_question(db, question_id, populate_existing=True)


async def delete_question(db: AsyncSession, question_id: int) -> None:
    question = await get_question(db, question_id)
    await db.delete(question)
    await commit_or_raise(db)
    logger.info(f"Question deleted: id={question_id}")


async def check_answer(db: AsyncSession, question_id: int, user_answer: int) -> Dict[str, Any]:
    """Pure comparison; the attempt is not recorded."""
    question = await get_question(db, question_id)
    return {
        "is_correct": question.is_correct(user_answer),
        "correct_answer": question.correct_answer,
        "explanation": question.explanation,
    }
