from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


PLACEHOLDER_NAME = "Pengguna SoulMatch"

PROFILE_SUMMARY_COLUMNS = "id, name, age, city, status, pekerjaan, about, main_photo"
PROFILE_DETAIL_COLUMNS = (
    "id, name, age, city, status, pekerjaan, about, interests, "
    "main_photo, gallery_a, gallery_b, created_at, updated_at"
)


def _list_or_empty(value):
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None]
    return []


# Rows as they come out of the profiles table
class ProfileSummary(BaseModel):
    id: str
    name: Optional[str] = None
    age: Optional[int] = None
    city: Optional[str] = None
    status: Optional[str] = None
    pekerjaan: Optional[str] = None
    about: Optional[str] = None
    photo_url: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("photo_url", "main_photo")
    )

    @classmethod
    def placeholder(cls, user_id: str | None) -> "ProfileSummary":
        return cls(id=user_id or "unknown", name=PLACEHOLDER_NAME)


class Profile(BaseModel):
    id: str
    name: Optional[str] = None
    age: Optional[int] = None
    city: Optional[str] = None
    status: Optional[str] = None
    pekerjaan: Optional[str] = None
    about: Optional[str] = None
    interests: List[str] = []
    main_photo: Optional[str] = None
    gallery_a: List[str] = []
    gallery_b: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("interests", "gallery_a", "gallery_b", mode="before")
    @classmethod
    def normalize_list(cls, value):
        return _list_or_empty(value)


class ProfileResponseModel(BaseModel):
    profile: Profile


# Profile updates (PATCH /profile and PATCH /admin/users/{id})
class ProfileUpdateModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    age: Optional[int] = None
    city: Optional[str] = None
    status: Optional[str] = None
    pekerjaan: Optional[str] = None
    about: Optional[str] = None
    interests: Optional[List[str]] = None
    main_photo: Optional[str] = None
    gallery_a: Optional[List[str]] = None
    gallery_b: Optional[List[str]] = None

    @field_validator("age", mode="before")
    @classmethod
    def blank_age_is_null(cls, value):
        if value == "":
            return None
        if isinstance(value, bool) or (value is not None and not isinstance(value, int)):
            raise ValueError("Age must be a whole number.")
        return value

    def to_patch(self) -> dict:
        """Only the fields the caller actually sent; explicit nulls are kept."""
        patch = self.model_dump(exclude_unset=True)
        for key in ("interests", "gallery_a", "gallery_b"):
            if key in patch and patch[key] is None:
                patch[key] = []
        return patch


class ProfileUpdateResponseModel(BaseModel):
    message: str
    profile: Profile


# Photo uploads
class PhotoUploadResponseModel(BaseModel):
    slot: str
    url: str
    profile: Profile
