import logging
import mimetypes
import uuid
from datetime import datetime, timezone

from supabase import Client

from app.core.errors import InvalidRequest, NotFound, UpstreamFailure, upstream_message

from .schemas import PROFILE_DETAIL_COLUMNS, Profile


logger = logging.getLogger(__name__)

PHOTO_SLOTS = ("main", "gallery_a", "gallery_b")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def get_profile(supabase: Client, user_id: str) -> Profile:
    try:
        result = (
            supabase.table("profiles")
            .select(PROFILE_DETAIL_COLUMNS)
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise UpstreamFailure("Failed to load profile.", upstream_message(e))

    if not result.data:
        raise NotFound("Profile not found.")

    return Profile(**result.data[0])


def update_profile(supabase: Client, user_id: str, patch: dict) -> Profile:
    """Apply a partial update and return the stored row."""
    if not patch:
        raise InvalidRequest("No changes were sent.")

    payload = {**patch, "updated_at": utc_now_iso()}

    try:
        result = (
            supabase.table("profiles").update(payload).eq("id", user_id).execute()
        )
    except Exception as e:
        raise UpstreamFailure("Failed to update profile.", upstream_message(e))

    if not result.data:
        raise NotFound("Profile not found.")

    logger.info(f"profile_updated id={user_id} fields={sorted(patch)}")
    return Profile(**result.data[0])


def photo_object_path(user_id: str, slot: str, filename: str | None) -> str:
    extension = ""
    if filename and "." in filename:
        extension = filename.rsplit(".", 1)[-1].lower()
    suffix = f".{extension}" if extension else ""
    return f"{user_id}/{slot}-{uuid.uuid4().hex}{suffix}"


def upload_photo(
    supabase: Client,
    bucket: str,
    user_id: str,
    slot: str,
    filename: str | None,
    content: bytes,
    content_type: str | None = None,
) -> tuple[str, Profile]:
    """
    Upload a profile photo and record its public URL on the profile.

    ``main`` replaces ``main_photo``; gallery slots append to their list.
    Returns ``(public_url, updated_profile)``.
    """
    if slot not in PHOTO_SLOTS:
        raise InvalidRequest(f"slot must be one of: {', '.join(PHOTO_SLOTS)}.")

    if not content:
        raise InvalidRequest("Uploaded file is empty.")

    content_type = content_type or mimetypes.guess_type(filename or "")[0]
    if not content_type or not content_type.startswith("image/"):
        raise InvalidRequest("Only image uploads are allowed.")

    object_path = photo_object_path(user_id, slot, filename)

    try:
        supabase.storage.from_(bucket).upload(
            object_path,
            content,
            {"content-type": content_type, "upsert": "false"},
        )
        public_url = supabase.storage.from_(bucket).get_public_url(object_path)
    except Exception as e:
        raise UpstreamFailure("Failed to upload photo.", upstream_message(e))

    profile = get_profile(supabase, user_id)

    if slot == "main":
        patch = {"main_photo": public_url}
    else:
        patch = {slot: [*getattr(profile, slot), public_url]}

    logger.info(f"photo_uploaded user={user_id} slot={slot} path={object_path}")
    return public_url, update_profile(supabase, user_id, patch)
