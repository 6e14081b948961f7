import uuid
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.constants.roles import Capability
from inventory_api.core.db import get_db
from inventory_api.models.users.user_models import User
from inventory_api.schemas.common import APIResponse, success_response
from inventory_api.schemas.users.user_schemas import (
    PasswordChangeSchema,
    ProfileUpdateSchema,
    UserCreateSchema,
    UserDetailSchema,
    UserListData,
    UserUpdateSchema,
)
from inventory_api.services.users.user_services import (
    change_password,
    create_user,
    delete_user,
    get_profile,
    get_user_by_id,
    list_users,
    update_profile,
    update_user,
)
from inventory_api.utils.check_roles import require_capability
from inventory_api.utils.get_user import get_current_user
from inventory_api.utils.logger import get_logger

router = APIRouter(prefix="/users", tags=["Users"])
logger = get_logger(__name__)

manage_users = require_capability(Capability.MANAGE_USERS)


# ---------------- PROFILE (any authenticated user) ----------------
@router.get("/profile", response_model=APIResponse[UserDetailSchema])
async def get_profile_api(current_user: User = Depends(get_current_user)):
    return success_response("Profile fetched", get_profile(current_user))


@router.put("/profile", response_model=APIResponse[UserDetailSchema])
async def update_profile_api(
    payload: ProfileUpdateSchema,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    logger.info("Update profile", extra={"user_id": str(current_user.id)})
    user = await update_profile(db, current_user, payload)
    return success_response("Profile updated successfully", user)


@router.put("/profile/password", response_model=APIResponse[None])
async def change_password_api(
    payload: PasswordChangeSchema,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await change_password(db, current_user, payload)
    return success_response("Password changed successfully")


# ---------------- ADMIN ----------------
@router.post("", response_model=APIResponse[UserDetailSchema], status_code=status.HTTP_201_CREATED)
async def create_user_api(
    payload: UserCreateSchema,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(manage_users),
):
    logger.info("Create user request", extra={"email": payload.email})
    user = await create_user(db, payload, admin)
    return success_response("User created successfully", user)


@router.get("", response_model=APIResponse[UserListData])
async def list_users_api(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(manage_users),
    search: Optional[str] = Query(None, description="Search by email or name"),
    role: Optional[Literal["admin", "user"]] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    users = await list_users(db, search, role, page, limit)
    return success_response("Users fetched", users)


@router.get("/{user_id}", response_model=APIResponse[UserDetailSchema])
async def get_user_api(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(manage_users),
):
    user = await get_user_by_id(db, user_id)
    return success_response("User fetched", user)


@router.put("/{user_id}", response_model=APIResponse[UserDetailSchema])
async def update_user_api(
    user_id: uuid.UUID,
    payload: UserUpdateSchema,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(manage_users),
):
    logger.info("Update user", extra={"user_id": str(user_id)})
    user = await update_user(db, user_id, payload, admin)
    return success_response("User updated successfully", user)


@router.delete("/{user_id}", response_model=APIResponse[None])
async def delete_user_api(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(manage_users),
):
    logger.info("Delete user", extra={"user_id": str(user_id)})
    await delete_user(db, user_id, admin)
    return success_response("User deleted successfully")
