from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, SecretStr, field_validator

from app.profiles.schemas import Profile, ProfileUpdateModel


AdminRole = Literal["superadmin", "admin"]


def _password_min_six(password: SecretStr) -> SecretStr:
    if len(password.get_secret_value()) < 6:
        raise ValueError("Password must be at least 6 characters long.")
    return password


# Users
class AdminUserItem(Profile):
    email: Optional[str] = None


class AdminUsersResponseModel(BaseModel):
    users: List[AdminUserItem]


class AdminCreateUserModel(ProfileUpdateModel):
    email: str
    password: SecretStr

    @field_validator("password")
    @classmethod
    def validate_password(cls, password: SecretStr) -> SecretStr:
        return _password_min_six(password)

    def profile_fields(self) -> dict:
        fields = self.to_patch()
        fields.pop("email", None)
        fields.pop("password", None)
        fields.setdefault("interests", [])
        return fields


class AdminCreateUserResponseModel(BaseModel):
    message: str
    user: AdminUserItem


class AdminMessageResponseModel(BaseModel):
    message: str


# Admins
class AdminItem(BaseModel):
    id: str
    email: Optional[str] = None
    role: AdminRole
    created_at: Optional[datetime] = None


class AdminsResponseModel(BaseModel):
    admins: List[AdminItem]


class AdminCreateModel(BaseModel):
    email: str
    password: SecretStr
    role: AdminRole

    @field_validator("password")
    @classmethod
    def validate_password(cls, password: SecretStr) -> SecretStr:
        return _password_min_six(password)


class AdminCreateResponseModel(BaseModel):
    message: str
    admin: AdminItem


class AdminRoleUpdateModel(BaseModel):
    role: AdminRole
