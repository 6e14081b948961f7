import uuid

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.core.db import get_db
from inventory_api.core.exceptions import Unauthenticated
from inventory_api.core.security import decode_access_token
from inventory_api.models.users.user_models import User
from inventory_api.utils.logger import get_logger

logger = get_logger("auth.guard")


async def get_current_user(
    request: Request,
    authorization: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> User:
    if not authorization or not authorization.startswith("Bearer "):
        logger.warning("Missing bearer token")
        raise Unauthenticated("Access token required")

    token = authorization.split("Bearer ", 1)[1].strip()
    payload = decode_access_token(token)

    try:
        user_id = uuid.UUID(payload["sub"])
    except ValueError:
        raise Unauthenticated("Invalid token subject")

    user = await db.get(User, user_id)

    if not user:
        logger.warning("Token user not found", extra={"user_id": str(user_id)})
        raise Unauthenticated("User not found")

    # end the lookup transaction so the pooled connection is back before the
    # route opens its own transactions (user stays loaded: expire_on_commit=False)
    await db.commit()

    request.state.user = user
    return user
