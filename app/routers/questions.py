import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas import (
    AnswerRequest,
    BookDeliveryRead,
    GlobalQuestionCreate,
    GlobalQuestionRead,
    GlobalQuestionsRead,
    QuestionCreate,
    QuestionRead,
    QuestionsRead,
)
from ..services.access import Identity
from ..services.answers import apply_answer
from ..services.book_compile import compile_book
from ..services.catalog import create_global_question, list_catalog_for_user
from ..services.mailer import DeliveryChannel, get_delivery_channel
from ..services.questions import create_custom_question, instantiate, list_questions
from ..services.renderer import BookRenderer, get_book_renderer
from ..utils import current_identity, require_admin_identity

router = APIRouter(prefix="/api/questions", tags=["questions"])


@router.get("/global", response_model=GlobalQuestionsRead)
async def get_global_questions(
    user_id: Optional[int] = Query(None),
    category_ids: Optional[List[uuid.UUID]] = Query(None),
    identity: Identity = Depends(current_identity),
    db: AsyncSession = Depends(get_db),
):
    rows = await list_catalog_for_user(db, identity, user_id, category_ids)
    return GlobalQuestionsRead(global_questions=[GlobalQuestionRead.model_validate(gq) for gq in rows])


@router.get("/new", response_model=QuestionsRead)
async def get_new_questions(
    user_id: int = Query(...),
    global_question_ids: List[uuid.UUID] = Query(default=[]),
    identity: Identity = Depends(current_identity),
    db: AsyncSession = Depends(get_db),
):
    created = await instantiate(db, identity, user_id, global_question_ids)
    return QuestionsRead(questions=[QuestionRead.from_question(q) for q in created])


@router.get("", response_model=QuestionsRead)
async def get_all_questions_for_user(
    user_id: int = Query(...),
    identity: Identity = Depends(current_identity),
    db: AsyncSession = Depends(get_db),
):
    rows = await list_questions(db, identity, user_id)
    return QuestionsRead(questions=[QuestionRead.from_question(q) for q in rows])


@router.patch("/{question_id}", response_model=QuestionRead)
async def patch_answer(
    question_id: uuid.UUID,
    payload: AnswerRequest,
    identity: Identity = Depends(current_identity),
    db: AsyncSession = Depends(get_db),
):
    question = await apply_answer(db, identity, question_id, payload.answer, payload.new_status)
    return QuestionRead.from_question(question)


@router.post("/newGlobalQuestion", response_model=GlobalQuestionRead)
async def create_new_global_question(
    payload: GlobalQuestionCreate,
    admin: Identity = Depends(require_admin_identity),
    db: AsyncSession = Depends(get_db),
):
    gq = await create_global_question(db, admin, payload.title, payload.category_id)
    return GlobalQuestionRead.model_validate(gq)


@router.post("/new", response_model=QuestionRead)
async def create_new_question(
    payload: QuestionCreate,
    identity: Identity = Depends(current_identity),
    db: AsyncSession = Depends(get_db),
):
    question = await create_custom_question(db, identity, payload.user_id, payload.title)
    return QuestionRead.from_question(question)


@router.post("/book", response_model=BookDeliveryRead)
async def send_request_to_create_book(
    user_id: int = Query(...),
    identity: Identity = Depends(current_identity),
    db: AsyncSession = Depends(get_db),
    renderer: BookRenderer = Depends(get_book_renderer),
    channel: DeliveryChannel = Depends(get_delivery_channel),
):
    result = await compile_book(db, identity, user_id, renderer, channel)
    return BookDeliveryRead(
        user_id=result.user_id,
        question_count=result.question_count,
        recipient=result.recipient,
        filename=result.filename,
        status=result.status,
    )


__all__ = ["router"]
