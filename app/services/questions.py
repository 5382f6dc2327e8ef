# app/services/questions.py
"""Personal question instantiation.

Personal questions are frozen copies: title and category are taken from the
catalog entry at creation time and never re-derived. Instantiating the same
catalog id twice yields two independent copies.
"""
import logging
import uuid
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Question, QuestionStatus, DEFAULT_CATEGORY_ID
from app.services.access import Identity, authorize
from app.services.catalog import get_global_question

logger = logging.getLogger(__name__)


async def instantiate(
    db: AsyncSession,
    identity: Identity,
    user_id: int,
    global_question_ids: Iterable[uuid.UUID],
) -> list[Question]:
    authorize(identity, owner_id=user_id)

    created: list[Question] = []
    skipped = 0
    for gq_id in global_question_ids:
        gq = await get_global_question(db, gq_id)
        if gq is None:
            # deleted from the catalog in the meantime
            skipped += 1
            continue

        question = Question(
            id=uuid.uuid4(),
            global_question_id=gq.id,
            title=gq.title,
            category_id=gq.category_id,
            user_id=user_id,
            answer=None,
            status=QuestionStatus.unanswered,
        )
        db.add(question)
        await db.commit()
        created.append(question)

    logger.info("Instantiated %d question(s) for user %s (%d missing catalog id(s))", len(created), user_id, skipped)
    return created


async def create_custom_question(
    db: AsyncSession,
    identity: Identity,
    user_id: int,
    title: str,
) -> Question:
    authorize(identity, owner_id=user_id)
    question = Question(
        id=uuid.uuid4(),
        global_question_id=None,
        title=title,
        category_id=DEFAULT_CATEGORY_ID,
        user_id=user_id,
        answer=None,
        status=QuestionStatus.unanswered,
    )
    db.add(question)
    await db.commit()
    logger.info("User %s created custom question %s", user_id, question.id)
    return question


async def questions_for_user(db: AsyncSession, user_id: int) -> list[Question]:
    """All personal questions of a user in creation order (no access check)."""
    rows = await db.execute(
        select(Question)
        .where(Question.user_id == user_id)
        .order_by(Question.created_at.asc(), Question.id.asc())
    )
    return list(rows.scalars().all())


async def list_questions(db: AsyncSession, identity: Identity, user_id: int) -> list[Question]:
    authorize(identity, owner_id=user_id)
    return await questions_for_user(db, user_id)
