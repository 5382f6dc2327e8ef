# app/services/catalog.py
import logging
import uuid
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import NotFound
from app.models import (
    Category, GlobalQuestion, Question, Role, DEFAULT_CATEGORY_ID, DEFAULT_CATEGORY_NAME,
)
from app.services.access import Identity, authorize

logger = logging.getLogger(__name__)


async def ensure_default_category(db: AsyncSession) -> Category:
    """Create the well-known default category if it is missing."""
    existing = await db.get(Category, DEFAULT_CATEGORY_ID)
    if existing:
        return existing
    cat = Category(id=DEFAULT_CATEGORY_ID, name=DEFAULT_CATEGORY_NAME)
    db.add(cat)
    await db.commit()
    logger.info("Seeded default category %s", DEFAULT_CATEGORY_ID)
    return cat


async def list_categories(db: AsyncSession) -> list[Category]:
    rows = await db.execute(select(Category).order_by(Category.name.asc(), Category.id.asc()))
    return list(rows.scalars().all())


async def get_category(db: AsyncSession, category_id: uuid.UUID) -> Category:
    cat = await db.get(Category, category_id)
    if not cat:
        raise NotFound("Category", category_id)
    return cat


async def create_category(db: AsyncSession, identity: Identity, name: str) -> Category:
    authorize(identity, role=Role.admin)
    cat = Category(id=uuid.uuid4(), name=name.strip())
    db.add(cat)
    await db.commit()
    logger.info("Admin %s created category %s", identity.user_id, cat.id)
    return cat


async def get_global_question(db: AsyncSession, global_question_id: uuid.UUID) -> Optional[GlobalQuestion]:
    return await db.get(GlobalQuestion, global_question_id)


async def list_catalog(
    db: AsyncSession,
    exclude_ids: Iterable[uuid.UUID] = (),
    category_ids: Optional[Iterable[uuid.UUID]] = None,
) -> list[GlobalQuestion]:
    """Catalog entries not in ``exclude_ids``, optionally limited to ``category_ids``.

    An empty category filter means "no filter".
    """
    stmt = select(GlobalQuestion)
    exclude = set(exclude_ids or ())
    if exclude:
        stmt = stmt.where(GlobalQuestion.id.not_in(exclude))
    categories = set(category_ids or ())
    if categories:
        stmt = stmt.where(GlobalQuestion.category_id.in_(categories))
    rows = await db.execute(stmt.order_by(GlobalQuestion.created_at.asc(), GlobalQuestion.id.asc()))
    return list(rows.scalars().all())


async def assigned_catalog_ids(db: AsyncSession, user_id: int) -> set[uuid.UUID]:
    """Catalog ids the user already holds a personal copy of."""
    rows = await db.execute(
        select(Question.global_question_id)
        .where(Question.user_id == user_id, Question.global_question_id.is_not(None))
    )
    return set(rows.scalars().all())


async def list_catalog_for_user(
    db: AsyncSession,
    identity: Identity,
    user_id: Optional[int] = None,
    category_ids: Optional[Iterable[uuid.UUID]] = None,
) -> list[GlobalQuestion]:
    """Catalog listing; with ``user_id`` it hides entries that user already took."""
    exclude: set[uuid.UUID] = set()
    if user_id is not None:
        authorize(identity, owner_id=user_id)
        exclude = await assigned_catalog_ids(db, user_id)
    return await list_catalog(db, exclude, category_ids)


async def create_global_question(
    db: AsyncSession,
    identity: Identity,
    title: str,
    category_id: Optional[uuid.UUID] = None,
) -> GlobalQuestion:
    authorize(identity, role=Role.admin)
    category_id = category_id or DEFAULT_CATEGORY_ID
    await get_category(db, category_id)

    gq = GlobalQuestion(id=uuid.uuid4(), title=title, category_id=category_id)
    db.add(gq)
    await db.commit()
    logger.info("Admin %s created catalog question %s in category %s", identity.user_id, gq.id, category_id)
    return gq
