from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.errors import NotFound
from app.models import User
from app.schemas import AddressSettingsRead, AddressSettingsUpdate, UserRead
from app.services.access import Identity
from app.services.address import get_address, upsert_address
from app.utils import current_identity


router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/current", response_model=UserRead)
async def get_current_user(
    identity: Identity = Depends(current_identity),
    db: AsyncSession = Depends(get_db),
):
    user = await db.get(User, identity.user_id)
    if user is None:
        raise NotFound("User", identity.user_id)
    return UserRead.model_validate(user)


@router.get("/{user_id}/address", response_model=AddressSettingsRead)
async def read_address_settings(
    user_id: int,
    identity: Identity = Depends(current_identity),
    db: AsyncSession = Depends(get_db),
):
    return AddressSettingsRead.model_validate(await get_address(db, identity, user_id))


@router.put("/{user_id}/address", response_model=AddressSettingsRead)
async def save_address_settings(
    user_id: int,
    payload: AddressSettingsUpdate,
    identity: Identity = Depends(current_identity),
    db: AsyncSession = Depends(get_db),
):
    address = await upsert_address(db, identity, user_id, payload.model_dump(exclude_unset=True))
    return AddressSettingsRead.model_validate(address)
