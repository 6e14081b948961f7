from datetime import datetime, timezone
import uuid

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError

from inventory_api.constants.error_codes import ErrorCode
from inventory_api.constants.roles import Role
from inventory_api.core.config import ACCESS_TOKEN_EXPIRE_MINUTES
from inventory_api.core.db import Database
from inventory_api.core.exceptions import DuplicateName, Unauthenticated
from inventory_api.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_password,
    verify_password,
)
from inventory_api.models.users.user_models import User, RefreshToken
from inventory_api.schemas.auth.auth_schemas import AuthResult, RegisterRequest, TokenPair
from inventory_api.schemas.users.user_schemas import UserDetailSchema
from inventory_api.utils.logger import get_logger

logger = get_logger("auth.service")


def _invalid_refresh() -> Unauthenticated:
    return Unauthenticated(
        "Refresh token is invalid or expired. Please login again.",
        ErrorCode.INVALID_REFRESH_TOKEN,
    )


# =====================================================
# TOKEN ISSUE (caller commits)
# =====================================================
def _issue_tokens(db: AsyncSession, user: User) -> TokenPair:
    access_token = create_access_token(subject=str(user.id), role=user.role)
    refresh_token, refresh_expiry = create_refresh_token(subject=str(user.id))

    db.add(
        RefreshToken(
            token=refresh_token,
            user_id=user.id,
            expires_at=refresh_expiry,
        )
    )

    return TokenPair(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


def _auth_result(tokens: TokenPair, user: User) -> AuthResult:
    return AuthResult(
        **tokens.model_dump(),
        user=UserDetailSchema.model_validate(user),
    )


# =====================================================
# REGISTER
# =====================================================
async def register_user(db: AsyncSession, payload: RegisterRequest) -> AuthResult:
    email = payload.email.lower()
    logger.info("Registering user", extra={"email": email})

    exists = await db.scalar(select(User.id).where(User.email == email))
    if exists:
        raise DuplicateName("Email already registered", ErrorCode.USER_EMAIL_EXISTS)

    user = User(
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=email,
        password_hash=hash_password(payload.password),
        role=Role.USER.value,
    )
    db.add(user)

    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise DuplicateName("Email already registered", ErrorCode.USER_EMAIL_EXISTS)

    tokens = _issue_tokens(db, user)
    await db.commit()
    await db.refresh(user)

    logger.info("User registered", extra={"user_id": str(user.id)})
    return _auth_result(tokens, user)


# =====================================================
# LOGIN
# =====================================================
async def login_user(db: AsyncSession, email: str, password: str) -> AuthResult:
    email = email.lower()
    logger.info("Authenticating user", extra={"email": email})

    user = await db.scalar(select(User).where(User.email == email))

    if not user or not verify_password(password, user.password_hash):
        logger.warning("Invalid credentials", extra={"email": email})
        raise Unauthenticated("Invalid credentials", ErrorCode.INVALID_CREDENTIALS)

    tokens = _issue_tokens(db, user)
    await db.commit()

    logger.info("Login successful", extra={"user_id": str(user.id)})
    return _auth_result(tokens, user)


# =====================================================
# REFRESH (rotation)
# =====================================================
async def refresh_tokens(db: AsyncSession, refresh_token_value: str) -> TokenPair:
    logger.info("Refreshing token")

    payload = decode_refresh_token(refresh_token_value)

    try:
        user_id = uuid.UUID(payload["sub"])
    except ValueError:
        raise _invalid_refresh()

    # single use: a concurrent refresh with the same token deletes nothing
    result = await db.execute(
        delete(RefreshToken).where(
            RefreshToken.token == refresh_token_value,
            RefreshToken.user_id == user_id,
            RefreshToken.expires_at > datetime.now(timezone.utc),
        ).execution_options(synchronize_session=False)
    )

    if result.rowcount != 1:
        await db.rollback()
        logger.warning("Unknown or expired refresh token", extra={"user_id": str(user_id)})
        raise _invalid_refresh()

    user = await db.get(User, user_id)
    if not user:
        await db.rollback()
        raise _invalid_refresh()

    tokens = _issue_tokens(db, user)
    await db.commit()

    logger.info("Token refreshed", extra={"user_id": str(user.id)})
    return tokens


# =====================================================
# LOGOUT
# =====================================================
async def logout_user(db: AsyncSession, user: User, refresh_token_value: str | None = None) -> int:
    logger.info("Logging out user", extra={"user_id": str(user.id)})

    stmt = delete(RefreshToken).where(RefreshToken.user_id == user.id)
    if refresh_token_value:
        stmt = stmt.where(RefreshToken.token == refresh_token_value)

    result = await db.execute(stmt)
    await db.commit()

    logger.info("Logout successful", extra={"user_id": str(user.id), "revoked": result.rowcount})
    return result.rowcount


# =====================================================
# SCHEDULED SWEEP
# =====================================================
async def purge_expired_refresh_tokens(database: Database) -> int:
    async with database.session() as db:
        result = await db.execute(
            delete(RefreshToken).where(
                RefreshToken.expires_at <= datetime.now(timezone.utc)
            ).execution_options(synchronize_session=False)
        )
        await db.commit()

    if result.rowcount:
        logger.info("Expired refresh tokens purged", extra={"count": result.rowcount})
    return result.rowcount
