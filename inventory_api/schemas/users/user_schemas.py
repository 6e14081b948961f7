import re
import uuid
from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field
from typing import Annotated, Optional, List, Literal
from datetime import datetime

from inventory_api.schemas.common import Pagination

_PASSWORD_RULES = (re.compile(r"[a-z]"), re.compile(r"[A-Z]"), re.compile(r"\d"))


def check_password_strength(value: str) -> str:
    if not all(rule.search(value) for rule in _PASSWORD_RULES):
        raise ValueError(
            "Password must contain at least one uppercase letter, "
            "one lowercase letter, and one number"
        )
    return value


StrongPassword = Annotated[str, Field(min_length=6), AfterValidator(check_password_strength)]


# =========================
# CREATE / UPDATE
# =========================
class UserCreateSchema(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, str_strip_whitespace=True)

    first_name: Optional[str] = Field(default=None, alias="firstName", max_length=100)
    last_name: Optional[str] = Field(default=None, alias="lastName", max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=30)
    password: StrongPassword
    role: Literal["admin", "user"] = "user"


class UserUpdateSchema(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, str_strip_whitespace=True)

    first_name: Optional[str] = Field(default=None, alias="firstName", max_length=100)
    last_name: Optional[str] = Field(default=None, alias="lastName", max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=30)
    role: Optional[Literal["admin", "user"]] = None


class ProfileUpdateSchema(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, str_strip_whitespace=True)

    first_name: Optional[str] = Field(default=None, alias="firstName", max_length=100)
    last_name: Optional[str] = Field(default=None, alias="lastName", max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=30)


class PasswordChangeSchema(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    current_password: str = Field(alias="currentPassword")
    new_password: StrongPassword = Field(alias="newPassword")


# =========================
# RESPONSE SCHEMAS
# =========================
class UserDetailSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: uuid.UUID
    first_name: Optional[str] = Field(alias="firstName")
    last_name: Optional[str] = Field(alias="lastName")
    email: str
    phone: Optional[str]
    role: str
    created_at: datetime = Field(alias="createdAt")
    updated_at: Optional[datetime] = Field(alias="updatedAt")


class UserListData(BaseModel):
    users: List[UserDetailSchema]
    pagination: Pagination
