import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas import CategoriesRead, CategoryCreate, CategoryRead
from ..services.access import Identity
from ..services.catalog import create_category, get_category, list_categories
from ..utils import current_identity, require_admin_identity

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("", response_model=CategoriesRead)
async def get_all_categories(
    identity: Identity = Depends(current_identity),
    db: AsyncSession = Depends(get_db),
):
    rows = await list_categories(db)
    return CategoriesRead(categories=[CategoryRead.model_validate(c) for c in rows])


@router.get("/{category_id}", response_model=CategoryRead)
async def get_one_category(
    category_id: uuid.UUID,
    identity: Identity = Depends(current_identity),
    db: AsyncSession = Depends(get_db),
):
    return CategoryRead.model_validate(await get_category(db, category_id))


@router.post("", response_model=CategoryRead)
async def create_new_category(
    payload: CategoryCreate,
    admin: Identity = Depends(require_admin_identity),
    db: AsyncSession = Depends(get_db),
):
    return CategoryRead.model_validate(await create_category(db, admin, payload.name))
