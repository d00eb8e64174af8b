"""
learnpath/routes/questions.py
Quiz question routes and answer checking
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnpath.database import get_db
from learnpath.orm.question import Question
from learnpath.rbac import ADMIN_ONLY, STAFF_ROLES, AuthUser, get_current_user, require_role
from learnpath.schemas.common import ok
from learnpath.schemas.content import (
    CheckAnswerRequest,
    CheckAnswerResponse,
    QuestionCreate,
    QuestionResponse,
    QuestionUpdate,
)
from learnpath.services import question_service

router = APIRouter(prefix="/questions", tags=["Questions"])


def question_data(question: Question) -> dict:
    return QuestionResponse.model_validate(question).model_dump(mode="json")


@router.get("")
async def list_questions(content_id: int = Query(..., gt=0), db: AsyncSession = Depends(get_db)):
    questions = await question_service.list_questions(db, content_id)
    return ok([question_data(q) for q in questions])


@router.get("/{question_id}")
async def get_question(question_id: int, db: AsyncSession = Depends(get_db)):
    question = await question_service.get_question(db, question_id)
    return ok(question_data(question))


@router.post("/{question_id}/check")
async def check_answer(
    question_id: int,
    data: CheckAnswerRequest,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(get_current_user),
):
    """Grade an answer without recording the attempt."""
    result = await question_service.check_answer(db, question_id, data.user_answer)
    return ok(CheckAnswerResponse(**result).model_dump(mode="json"))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_question(
    data: QuestionCreate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(require_role(STAFF_ROLES)),
):
    question = await question_service.create_question(db, data)
    return ok(question_data(question), "Question created")


@router.post("/{question_id}")
@router.put("/{question_id}", include_in_schema=False)
async def update_question(
    question_id: int,
    data: QuestionUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(require_role(STAFF_ROLES)),
):
    question = await question_service.update_question(db, question_id, data)
    return ok(question_data(question), "Question updated")


@router.delete("/{question_id}")
async def delete_question(
    question_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: AuthUser = Depends(require_role(ADMIN_ONLY)),
):
    await question_service.delete_question(db, question_id)
    return ok(message="Question deleted")
