# app/services/answers.py
import logging
import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import NotFound
from app.models import Question, QuestionStatus
from app.services.access import Identity, authorize

logger = logging.getLogger(__name__)


async def apply_answer(
    db: AsyncSession,
    identity: Identity,
    question_id: uuid.UUID,
    answer: Optional[str] = None,
    new_status: Optional[QuestionStatus] = None,
) -> Question:
    """Set the answer text and/or status of a personal question.

    The two fields are independent: an answer does not advance the status and
    a status may be set without an answer. Any status may overwrite any other.
    Ownership is checked against the question's own owner.
    """
    question = await db.get(Question, question_id)
    if question is None:
        raise NotFound("Question", question_id)

    authorize(identity, owner_id=question.user_id)

    if answer is not None:
        question.answer = answer
    if new_status is not None:
        question.status = new_status

    await db.commit()
    logger.info(
        "User %s updated question %s (answer=%s, status=%s)",
        identity.user_id, question.id, answer is not None, question.status.value,
    )
    return question
