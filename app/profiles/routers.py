from fastapi import APIRouter, Depends, File, Form, UploadFile
from supabase import Client

from app.core.config import get_settings
from app.core.supabase_client import get_supabase
from app.core.dependencies import get_current_user_id

from . import service
from .schemas import (
    ProfileResponseModel,
    ProfileUpdateModel,
    ProfileUpdateResponseModel,
    PhotoUploadResponseModel,
)


router = APIRouter()


@router.get("", response_model=ProfileResponseModel, status_code=200)
def get_my_profile(
    user_id: str = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
):
    """
    The caller's own profile.

    **Errors**
    - 401: Missing or invalid token
    - 404: Profile row missing
    """
    return {"profile": service.get_profile(supabase, user_id)}


@router.patch("", response_model=ProfileUpdateResponseModel, status_code=200)
def update_my_profile(
    data: ProfileUpdateModel,
    user_id: str = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
):
    """
    Partially update the caller's profile.

    Only the fields present in the body are written; `interests`,
    `gallery_a` and `gallery_b` must be lists of strings and `age` a whole
    number or null.

    **Errors**
    - 400: Nothing to update or wrong field types
    """
    profile = service.update_profile(supabase, user_id, data.to_patch())
    return {"message": "Profile updated.", "profile": profile}


@router.post("/photos", response_model=PhotoUploadResponseModel, status_code=201)
def upload_profile_photo(
    file: UploadFile = File(...),
    slot: str = Form("main"),
    user_id: str = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
):
    """
    Upload a photo to the profile bucket.

    **Form Fields**
    - `file`: the image
    - `slot`: `main` (replaces the main photo), `gallery_a` or `gallery_b`
      (appended to that gallery)

    **Returns**
    - `url`: public URL of the stored object
    - `profile`: the updated profile
    """
    content = file.file.read()
    url, profile = service.upload_photo(
        supabase,
        get_settings().profile_bucket,
        user_id,
        slot,
        file.filename,
        content,
        file.content_type,
    )
    return {"slot": slot, "url": url, "profile": profile}
