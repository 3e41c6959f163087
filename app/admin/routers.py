import logging

from fastapi import APIRouter, Depends
from supabase import Client

from app.core.supabase_client import get_supabase
from app.core.dependencies import require_admin, require_superadmin
from app.core.errors import UpstreamFailure, upstream_message
from app.profiles.schemas import PROFILE_DETAIL_COLUMNS, ProfileUpdateModel
from app.profiles.service import update_profile, utc_now_iso

from .schemas import (
    AdminUsersResponseModel,
    AdminCreateUserModel,
    AdminCreateUserResponseModel,
    AdminMessageResponseModel,
    AdminsResponseModel,
    AdminCreateModel,
    AdminCreateResponseModel,
    AdminRoleUpdateModel,
)


logger = logging.getLogger(__name__)
router = APIRouter()

USER_PAGE_SIZE = 500


def create_confirmed_user(supabase: Client, email: str, password: str, role: str) -> str:
    try:
        result = supabase.auth.admin.create_user(
            {
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": {"role": role},
            }
        )
    except Exception as e:
        raise UpstreamFailure("Failed to create account.", upstream_message(e))

    if not result or not result.user:
        raise UpstreamFailure("Failed to create account.", "Unknown error")

    return result.user.id


def delete_auth_user(supabase: Client, user_id: str):
    try:
        supabase.auth.admin.delete_user(user_id)
    except Exception as e:
        logger.error(f"auth_user_delete_failed id={user_id} error={e}")


@router.get("/users", response_model=AdminUsersResponseModel, status_code=200)
def list_users(
    admin=Depends(require_admin),
    supabase: Client = Depends(get_supabase),
):
    """
    Most recently updated profiles (max 500), each merged with the account
    email from Supabase Auth.

    **Errors**
    - 401: Unauthorized
    - 403: Caller is not an admin
    - 500: Database error
    """
    try:
        profiles = (
            supabase.table("profiles")
            .select(PROFILE_DETAIL_COLUMNS)
            .order("updated_at", desc=True)
            .limit(USER_PAGE_SIZE)
            .execute()
        )
    except Exception as e:
        raise UpstreamFailure("Failed to load user profiles.", upstream_message(e))

    try:
        auth_users = supabase.auth.admin.list_users(page=1, per_page=USER_PAGE_SIZE)
    except Exception as e:
        logger.error(f"list_users_failed error={e}")
        auth_users = []

    emails = {str(user.id): user.email for user in auth_users or []}

    return {
        "users": [
            {**row, "email": emails.get(str(row["id"]))} for row in profiles.data or []
        ]
    }


@router.post("/users", response_model=AdminCreateUserResponseModel, status_code=201)
def create_user(
    data: AdminCreateUserModel,
    admin=Depends(require_admin),
    supabase: Client = Depends(get_supabase),
):
    """
    Create a confirmed member account together with its profile.

    If the profile cannot be stored the new auth user is deleted again.

    **Errors**
    - 403: Caller is not an admin
    - 400: Missing email/password or password shorter than 6 characters
    - 500: Supabase error
    """
    user_id = create_confirmed_user(
        supabase, data.email, data.password.get_secret_value(), "member"
    )

    now = utc_now_iso()
    profile = {"id": user_id, **data.profile_fields(), "created_at": now, "updated_at": now}

    try:
        supabase.table("profiles").upsert(profile).execute()
    except Exception as e:
        delete_auth_user(supabase, user_id)
        raise UpstreamFailure("Failed to save user profile.", upstream_message(e))

    logger.info(f"admin_user_created id={user_id} by={admin['user_id']}")

    return {
        "message": "User created.",
        "user": {**profile, "email": data.email},
    }


@router.patch(
    "/users/{user_id}", response_model=AdminMessageResponseModel, status_code=200
)
def update_user(
    user_id: str,
    data: ProfileUpdateModel,
    admin=Depends(require_admin),
    supabase: Client = Depends(get_supabase),
):
    """
    Partially update any member's profile. Same field rules as
    `PATCH /profile`.

    **Errors**
    - 400: Nothing to update
    - 403: Caller is not an admin
    - 404: Profile not found
    """
    update_profile(supabase, user_id, data.to_patch())
    return {"message": "Profile updated."}


@router.get("/admins", response_model=AdminsResponseModel, status_code=200)
def list_admins(
    admin=Depends(require_superadmin),
    supabase: Client = Depends(get_supabase),
):
    """
    All admin accounts, oldest first. Superadmin only.
    """
    try:
        result = (
            supabase.table("admin_users")
            .select("id, email, role, created_at")
            .order("created_at", desc=False)
            .execute()
        )
    except Exception as e:
        raise UpstreamFailure("Failed to load admins.", upstream_message(e))

    return {"admins": result.data or []}


@router.post("/admins", response_model=AdminCreateResponseModel, status_code=201)
def create_admin(
    data: AdminCreateModel,
    admin=Depends(require_superadmin),
    supabase: Client = Depends(get_supabase),
):
    """
    Create a confirmed account with an admin role. Superadmin only.

    If the `admin_users` row cannot be stored the new auth user is deleted
    again.
    """
    user_id = create_confirmed_user(
        supabase, data.email, data.password.get_secret_value(), data.role
    )

    try:
        supabase.table("admin_users").upsert(
            {"id": user_id, "email": data.email, "role": data.role}
        ).execute()
    except Exception as e:
        delete_auth_user(supabase, user_id)
        raise UpstreamFailure("Failed to save admin.", upstream_message(e))

    logger.info(f"admin_created id={user_id} role={data.role} by={admin['user_id']}")

    return {
        "message": "Admin created.",
        "admin": {"id": user_id, "email": data.email, "role": data.role},
    }


@router.patch(
    "/admins/{admin_id}", response_model=AdminMessageResponseModel, status_code=200
)
def update_admin_role(
    admin_id: str,
    data: AdminRoleUpdateModel,
    admin=Depends(require_superadmin),
    supabase: Client = Depends(get_supabase),
):
    """
    Change an admin's role; the auth user's metadata follows.
    """
    try:
        supabase.table("admin_users").update({"role": data.role}).eq(
            "id", admin_id
        ).execute()
    except Exception as e:
        raise UpstreamFailure("Failed to update admin role.", upstream_message(e))

    try:
        supabase.auth.admin.update_user_by_id(
            admin_id, {"user_metadata": {"role": data.role}}
        )
    except Exception as e:
        logger.error(f"admin_metadata_update_failed id={admin_id} error={e}")

    return {"message": "Admin role updated."}


@router.delete(
    "/admins/{admin_id}", response_model=AdminMessageResponseModel, status_code=200
)
def delete_admin(
    admin_id: str,
    admin=Depends(require_superadmin),
    supabase: Client = Depends(get_supabase),
):
    """
    Remove an admin row and delete the underlying auth user.
    """
    try:
        supabase.table("admin_users").delete().eq("id", admin_id).execute()
    except Exception as e:
        raise UpstreamFailure("Failed to delete admin.", upstream_message(e))

    delete_auth_user(supabase, admin_id)

    return {"message": "Admin deleted."}
