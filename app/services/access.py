# app/services/access.py
"""Caller identity and authorization checks.

A bearer token is verified once per request and turned into an ``Identity``;
services receive that value explicitly and call ``authorize`` with the owner
id of the resource they are about to touch (or a required role).
"""
import logging
from dataclasses import dataclass
from typing import Optional, Union

import jwt
from fastapi_users.jwt import decode_jwt

from app.errors import Forbidden, Unauthenticated
from app.models import Role
from app.users import SECRET, TOKEN_AUDIENCE

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Identity:
    user_id: int
    role: Role = Role.user

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin


def identify(token: Optional[str]) -> Identity:
    """Verify a bearer token and return the subject it names.

    Expiry is enforced with no leeway. Tokens without a ``role`` claim are
    treated as standard users.
    """
    if not token:
        raise Unauthenticated()
    try:
        data = decode_jwt(token, SECRET, [TOKEN_AUDIENCE])
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("Token expired")
    except jwt.PyJWTError:
        raise Unauthenticated("Invalid token")

    try:
        user_id = int(data["sub"])
    except (KeyError, TypeError, ValueError):
        raise Unauthenticated("Invalid token subject")

    try:
        role = Role(data.get("role") or Role.user.value)
    except ValueError:
        raise Unauthenticated("Invalid token role")
    return Identity(user_id=user_id, role=role)


def authorize(
    credential: Union[Identity, str, None],
    owner_id: Optional[int] = None,
    role: Optional[Role] = None,
) -> Identity:
    """Return the caller's identity if it may act on ``owner_id`` / needs ``role``.

    ``credential`` is either an already-resolved Identity or a raw bearer
    token. Owner checks have no admin bypass.
    """
    identity = credential if isinstance(credential, Identity) else identify(credential)
    if owner_id is not None and identity.user_id != owner_id:
        logger.info("User %s denied access to resources of user %s", identity.user_id, owner_id)
        raise Forbidden()
    if role is not None and identity.role != role:
        logger.info("User %s lacks role %s", identity.user_id, role.value)
        raise Forbidden(f"{role.value} role required")
    return identity
