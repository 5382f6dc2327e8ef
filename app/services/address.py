# app/services/address.py
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import NotFound
from app.models import AddressSettings
from app.services.access import Identity, authorize

logger = logging.getLogger(__name__)

ADDRESS_FIELDS = tuple(attr for attr, _ in AddressSettings.FIELD_LABELS)


async def find_address(db: AsyncSession, user_id: int) -> Optional[AddressSettings]:
    return (
        await db.execute(select(AddressSettings).where(AddressSettings.user_id == user_id))
    ).scalars().first()


async def get_address(db: AsyncSession, identity: Identity, user_id: int) -> AddressSettings:
    authorize(identity, owner_id=user_id)
    address = await find_address(db, user_id)
    if address is None:
        raise NotFound("AddressSettings", user_id)
    return address


async def upsert_address(db: AsyncSession, identity: Identity, user_id: int, fields: dict) -> AddressSettings:
    authorize(identity, owner_id=user_id)
    address = await find_address(db, user_id)
    if address is None:
        address = AddressSettings(user_id=user_id)
        db.add(address)

    for attr in ADDRESS_FIELDS:
        if attr in fields:
            setattr(address, attr, (fields[attr] or "").strip() or None)

    await db.commit()
    logger.info("User %s saved address settings", user_id)
    return address
