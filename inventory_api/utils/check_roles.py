from fastapi import Depends

from inventory_api.constants.roles import Capability, Role, ROLE_CAPABILITIES
from inventory_api.core.exceptions import Forbidden
from inventory_api.models.users.user_models import User
from inventory_api.utils.get_user import get_current_user
from inventory_api.utils.logger import get_logger

logger = get_logger("auth.policy")


def is_allowed(role: str, capability: Capability) -> bool:
    """Single authorization policy: may ``role`` exercise ``capability``?"""
    try:
        granted = ROLE_CAPABILITIES[Role(role.lower())]
    except ValueError:
        return False
    return capability in granted


def require_capability(capability: Capability):
    async def capability_checker(user: User = Depends(get_current_user)) -> User:
        if not is_allowed(user.role, capability):
            logger.warning(
                "Capability denied",
                extra={"user_id": str(user.id), "role": user.role, "capability": capability.value},
            )
            raise Forbidden()
        return user
    return capability_checker
