from typing import Optional

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.core.db import get_db
from inventory_api.models.users.user_models import User
from inventory_api.schemas.auth.auth_schemas import (
    AuthResult,
    LoginRequest,
    LogoutRequest,
    RefreshRequest,
    RegisterRequest,
    TokenPair,
)
from inventory_api.schemas.common import APIResponse, success_response
from inventory_api.schemas.users.user_schemas import UserDetailSchema
from inventory_api.services.auth.auth_service import (
    login_user,
    logout_user,
    refresh_tokens,
    register_user,
)
from inventory_api.utils.get_user import get_current_user
from inventory_api.utils.logger import get_logger

logger = get_logger("auth.router")

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=APIResponse[AuthResult], status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    logger.info("Register attempt", extra={"email": payload.email})

    result = await register_user(db, payload)
    return success_response("Registration successful", result)


@router.post("/login", response_model=APIResponse[AuthResult])
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    logger.info("Login attempt", extra={"email": payload.email})

    result = await login_user(db, payload.email, payload.password)
    return success_response("Login successful", result)


@router.post("/refresh", response_model=APIResponse[TokenPair])
async def refresh(
    payload: RefreshRequest,
    db: AsyncSession = Depends(get_db),
):
    logger.info("Token refresh attempt")

    tokens = await refresh_tokens(db, payload.refresh_token)
    return success_response("Token refreshed", tokens)


@router.post("/logout", response_model=APIResponse[None])
async def logout(
    payload: Optional[LogoutRequest] = Body(None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    logger.info(
        "Logout request",
        extra={"user_id": str(current_user.id), "email": current_user.email},
    )

    await logout_user(db, current_user, payload.refresh_token if payload else None)
    return success_response("Logged out successfully")


@router.get("/me", response_model=APIResponse[UserDetailSchema])
async def me(current_user: User = Depends(get_current_user)):
    return success_response("Current user fetched", UserDetailSchema.model_validate(current_user))
