import re
from pydantic import BaseModel, SecretStr, field_validator
from typing import Optional

from app.profiles.schemas import Profile


"""
auth/register
"""


class UserRegistrationModel(BaseModel):
    email: str
    name: str
    password: SecretStr

    @field_validator("email")
    @classmethod
    def validate_email(cls, email: str) -> str:
        email = email.strip().lower()
        if not re.match(r"^[^@\s]+@[^@\s]+\.[^@\s]+$", email):
            raise ValueError("Email is not valid.")
        return email

    @field_validator("name")
    @classmethod
    def validate_name(cls, name: str) -> str:
        name = name.strip()
        if len(name) < 2:
            raise ValueError("Name must be at least 2 characters long.")
        return name

    @field_validator("password")
    @classmethod
    def validate_password(cls, password: SecretStr) -> SecretStr:
        password_str = password.get_secret_value()

        if len(password_str) < 8:
            raise ValueError("Password must be at least 8 characters long.")

        # At least one uppercase letter and one digit.
        if not re.match(r"^(?=.*[A-Z])(?=.*\d).+$", password_str):
            raise ValueError(
                "Password must contain at least one uppercase letter and one number."
            )

        return password


class UserRegistrationResponseModel(BaseModel):
    id: str
    email: str
    name: str


"""
auth/login
"""


class UserLoginModel(BaseModel):
    email: str
    password: SecretStr


class UserLoginResponseModel(BaseModel):
    access_token: str
    expires_in: int
    user_id: str
    email: str


"""
auth/access
"""


class AccessTokenResponseModel(BaseModel):
    access_token: str


"""
auth/me
"""


class AuthInfo(BaseModel):
    id: str
    email: Optional[str] = None


class MeResponseModel(BaseModel):
    auth: AuthInfo
    profile: Optional[Profile] = None
    is_admin: bool
    role: Optional[str] = None
