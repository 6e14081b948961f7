import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, delete, or_
from sqlalchemy.exc import IntegrityError

from inventory_api.models.users.user_models import User
from inventory_api.schemas.users.user_schemas import (
    UserCreateSchema,
    UserUpdateSchema,
    ProfileUpdateSchema,
    PasswordChangeSchema,
    UserDetailSchema,
    UserListData,
)
from inventory_api.schemas.common import Pagination, page_offset
from inventory_api.core.security import hash_password, verify_password
from inventory_api.core.exceptions import (
    AppException,
    DuplicateName,
    NotFound,
    ValidationFailed,
)
from inventory_api.constants.error_codes import ErrorCode
from inventory_api.utils.logger import get_logger

logger = get_logger(__name__)


def _email_taken() -> DuplicateName:
    return DuplicateName("Email already in use", ErrorCode.USER_EMAIL_EXISTS)


async def _ensure_email_free(db: AsyncSession, email: str, exclude_id: uuid.UUID | None = None) -> None:
    stmt = select(User.id).where(User.email == email)
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    if await db.scalar(stmt):
        raise _email_taken()


async def _get_user_or_404(db: AsyncSession, user_id: uuid.UUID) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise NotFound("User not found", ErrorCode.USER_NOT_FOUND)
    return user


async def _apply_updates(db: AsyncSession, user: User, updates: dict) -> UserDetailSchema:
    if not updates:
        raise ValidationFailed("No changes detected")

    if "email" in updates:
        if updates["email"] is None:
            raise ValidationFailed(
                "Invalid user update",
                [{"field": "email", "message": "Field cannot be null"}],
            )
        updates["email"] = updates["email"].lower()
        if updates["email"] != user.email:
            await _ensure_email_free(db, updates["email"], exclude_id=user.id)

    if "role" in updates and updates["role"] is None:
        raise ValidationFailed(
            "Invalid user update",
            [{"field": "role", "message": "Field cannot be null"}],
        )

    for field, value in updates.items():
        setattr(user, field, value)

    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise _email_taken()

    await db.commit()
    await db.refresh(user)
    return UserDetailSchema.model_validate(user)


# =========================
# CREATE USER (admin)
# =========================
async def create_user(db: AsyncSession, payload: UserCreateSchema, admin: User) -> UserDetailSchema:
    email = payload.email.lower()
    await _ensure_email_free(db, email)

    user = User(
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=email,
        phone=payload.phone,
        password_hash=hash_password(payload.password),
        role=payload.role,
    )
    db.add(user)

    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise _email_taken()

    await db.commit()
    await db.refresh(user)

    logger.info("User created", extra={"user_id": str(user.id), "role": user.role, "admin_id": str(admin.id)})
    return UserDetailSchema.model_validate(user)


# =========================
# LIST USERS
# =========================
async def list_users(
    db: AsyncSession,
    search: str | None,
    role: str | None,
    page: int,
    limit: int,
) -> UserListData:
    base_stmt = select(User)

    if search:
        pattern = f"%{search}%"
        base_stmt = base_stmt.where(
            or_(
                User.email.ilike(pattern),
                User.first_name.ilike(pattern),
                User.last_name.ilike(pattern),
            )
        )

    if role:
        base_stmt = base_stmt.where(User.role == role)

    total = await db.scalar(
        select(func.count()).select_from(base_stmt.subquery())
    )

    users = (
        await db.scalars(
            base_stmt
            .order_by(User.created_at.desc(), User.email.asc())
            .offset(page_offset(page, limit))
            .limit(limit)
        )
    ).all()

    return UserListData(
        users=[UserDetailSchema.model_validate(u) for u in users],
        pagination=Pagination.build(page, limit, total or 0),
    )


# =========================
# GET USER BY ID
# =========================
async def get_user_by_id(db: AsyncSession, user_id: uuid.UUID) -> UserDetailSchema:
    user = await _get_user_or_404(db, user_id)
    return UserDetailSchema.model_validate(user)


# =========================
# UPDATE USER (admin)
# =========================
async def update_user(
    db: AsyncSession,
    user_id: uuid.UUID,
    payload: UserUpdateSchema,
    admin: User,
) -> UserDetailSchema:
    user = await _get_user_or_404(db, user_id)
    updated = await _apply_updates(db, user, payload.model_dump(exclude_unset=True))

    logger.info("User updated", extra={"user_id": str(user_id), "admin_id": str(admin.id)})
    return updated


# =========================
# DELETE USER (admin)
# =========================
async def delete_user(db: AsyncSession, user_id: uuid.UUID, admin: User) -> None:
    if user_id == admin.id:
        raise AppException(400, "You cannot delete your own account", ErrorCode.USER_SELF_DELETE)

    await _get_user_or_404(db, user_id)

    # refresh tokens go with the user (ON DELETE CASCADE)
    await db.execute(delete(User).where(User.id == user_id))
    await db.commit()

    logger.info("User deleted", extra={"user_id": str(user_id), "admin_id": str(admin.id)})


# =========================
# PROFILE (self-service)
# =========================
def get_profile(user: User) -> UserDetailSchema:
    return UserDetailSchema.model_validate(user)


async def update_profile(db: AsyncSession, user: User, payload: ProfileUpdateSchema) -> UserDetailSchema:
    updated = await _apply_updates(db, user, payload.model_dump(exclude_unset=True))

    logger.info("Profile updated", extra={"user_id": str(user.id)})
    return updated


async def change_password(db: AsyncSession, user: User, payload: PasswordChangeSchema) -> None:
    if not verify_password(payload.current_password, user.password_hash):
        logger.warning("Password change rejected", extra={"user_id": str(user.id)})
        raise ValidationFailed(
            "Current password is incorrect",
            [{"field": "currentPassword", "message": "Current password is incorrect"}],
        )

    user.password_hash = hash_password(payload.new_password)
    await db.commit()

    logger.info("Password changed", extra={"user_id": str(user.id)})
