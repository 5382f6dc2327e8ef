from typing import Optional

from fastapi import Depends

from .models import Role
from .services.access import Identity, authorize, identify
from .users import bearer_transport


# Dependency to resolve the caller once per request from the Authorization header
async def current_identity(
    token: Optional[str] = Depends(bearer_transport.scheme),
) -> Identity:
    return identify(token)


# Dependency to enforce the admin role (catalog authoring)
async def require_admin_identity(
    identity: Identity = Depends(current_identity),
) -> Identity:
    return authorize(identity, role=Role.admin)
