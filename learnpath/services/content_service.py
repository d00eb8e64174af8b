"""
learnpath/services/content_service.py
Content store: polymorphic lesson payload

Writes keep only the payload fields relevant to the content type; the
rest are nulled ("clear on type mismatch"), including on partial updates.

QUESTION REPLACEMENT CONTRACT:
update_content with a `questions` list deletes every existing question of
the content and inserts the given set. It is replace-all, not upsert.
Callers must always send the full question bank; questions left out are
permanently lost. An empty list removes them all.
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from learnpath.errors import ErrorCode, ValidationError
from learnpath.orm.content import Content, ContentType
from learnpath.orm.node import Node
from learnpath.orm.question import Question
from learnpath.schemas.content import ContentCreate, ContentUpdate
from learnpath.services.common import commit_or_raise, get_or_404

logger = logging.getLogger(__name__)


async def get_content(db: AsyncSession, content_id: int, populate_existing: bool = False) -> Content:
    return await get_or_404(
        db, Content, content_id, "Content",
        code=ErrorCode.CONTENT_NOT_FOUND, populate_existing=populate_existing,
    )


async def list_content(db: AsyncSession, content_type: Optional[ContentType] = None) -> List[Content]:
    """Newest first, optionally filtered by type."""
    stmt = select(Content)
    if content_type:
        stmt = stmt.where(Content.type == content_type)
    stmt = stmt.order_by(Content.created_at.desc(), Content.id.desc())
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_content_detail(db: AsyncSession, content_id: int) -> Tuple[Content, List[Node]]:
    """Content with its questions and the nodes that point at it."""
    content = await get_content(db, content_id)
    result = await db.execute(
        select(Node).where(Node.content_id == content_id).order_by(Node.id.asc())
    )
    return content, list(result.scalars().all())


def _check_required_payload(content: Content) -> None:
    if content.type == ContentType.VIDEO and not content.video_url:
        raise ValidationError("video_url is required for VIDEO content", field="video_url")
    if content.type == ContentType.ARTICLE and not content.article_text:
        raise ValidationError("article_text is required for ARTICLE content", field="article_text")


def _build_questions(items: List[dict]) -> List[Question]:
    return [
        Question(
            question=item["question"],
            options=list(item["options"]),
            correct_answer=item["correct_answer"],
            explanation=item.get("explanation"),
        )
        for item in items
    ]


async def create_content(db: AsyncSession, data: ContentCreate) -> Content:
    fields = data.model_dump(exclude={"questions"})
    content = Content(**fields)
    content.clear_irrelevant_fields()

    if data.questions:
        content.questions = _build_questions([q.model_dump() for q in data.questions])

    db.add(content)
    await commit_or_raise(db)

    logger.info(
        f"Content created: id={content.id} type={content.type.value} "
        f"questions={len(data.questions or [])}"
    )
    return await get_content(db, content.id, populate_existing=True)


async def update_content(db: AsyncSession, content_id: int, data: ContentUpdate) -> Content:
    """
    Apply the explicit fields, then null every payload field the effective
    type does not use. A present `questions` list replaces the whole bank.
    """
    content = await get_content(db, content_id)
    fields = data.model_dump(exclude_unset=True)
    questions = fields.pop("questions", None)

    for key, value in fields.items():
        setattr(content, key, value)

    content.clear_irrelevant_fields()
    _check_required_payload(content)

    if content.type != ContentType.QUIZ:
        if questions:
            raise ValidationError("questions are only allowed on QUIZ content", field="questions")
        if content.questions:
            logger.info(f"Content {content_id} is no longer a quiz, dropping {len(content.questions)} question(s)")
        content.questions = []
    elif questions is not None:
        logger.info(
            f"Replacing question bank of content {content_id}: "
            f"{len(content.questions)} removed, {len(questions)} inserted"
        )
        content.questions = _build_questions(questions)

    await commit_or_raise(db)
    logger.info(f"Content updated: id={content_id} fields={sorted(fields)}")
    return await get_content(db, content_id, populate_existing=True)


async def delete_content(db: AsyncSession, content_id: int) -> None:
    """Questions are deleted with the content; nodes keep existing with content_id NULL."""
    content = await get_content(db, content_id)
    await db.delete(content)
    await commit_or_raise(db)
    logger.info(f"Content deleted: id={content_id}")
