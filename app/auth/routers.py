import logging

from fastapi.responses import JSONResponse
from fastapi import APIRouter, Request, Response, Depends
from supabase import AuthApiError, Client

from app.core.config import get_settings
from app.core.supabase_client import get_supabase
from app.core.dependencies import verify_token, get_admin_role
from app.core.errors import Conflict, NotFound, Unauthorized, UpstreamFailure, upstream_message
from app.profiles.service import get_profile, utc_now_iso
from .schemas import (
    UserRegistrationModel,
    UserRegistrationResponseModel,
    UserLoginModel,
    UserLoginResponseModel,
    AccessTokenResponseModel,
    MeResponseModel,
)


logger = logging.getLogger(__name__)
router = APIRouter()

COOKIE_NAME = "refresh_token"
COOKIE_PATH = "/auth/access"
COOKIE_MAX_AGE = 60 * 60 * 24 * 7  # 7 days


def set_refresh_cookie(response: Response, refresh_token: str):
    settings = get_settings()
    response.set_cookie(
        key=COOKIE_NAME,
        value=refresh_token,
        httponly=settings.cookie_httponly,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
        domain=settings.cookie_domain,
        max_age=COOKIE_MAX_AGE,
        path=COOKIE_PATH,
    )


def clear_refresh_cookie(response: Response):
    response.delete_cookie(
        key=COOKIE_NAME,
        path=COOKIE_PATH,  # must match set_cookie()
        domain=get_settings().cookie_domain,
    )


@router.post("/register", response_model=UserRegistrationResponseModel, status_code=201)
def register_user(data: UserRegistrationModel, supabase: Client = Depends(get_supabase)):
    """
    Register a new member.

    Creates a Supabase Auth user and the matching `profiles` row holding the
    display name. Profile details (age, city, photos...) are filled in later
    through `PATCH /profile`.

    **Input Fields**
    - **email**: A valid email, not yet registered.
    - **name**: Display name, at least 2 characters.
    - **password**: At least 8 characters with one uppercase letter and one number.

    **Returns**
    - User ID
    - Email
    - Name

    **Errors**
    - 400: Invalid input
    - 409: Email already registered
    - 500: Supabase did not create the user, or another Supabase error
    """
    try:
        res = supabase.auth.sign_up(
            {
                "email": data.email,
                "password": data.password.get_secret_value(),
                "options": {"data": {"name": data.name, "role": "member"}},
            }
        )
    except AuthApiError as error:
        logger.error(f"supabase_error={error}")
        raise Conflict("Email is already registered. Please log in.", error.message)

    if not res.user:
        raise UpstreamFailure("Failed to create user.", "Sign-up returned no user.")

    user_id = res.user.id
    now = utc_now_iso()

    try:
        supabase.table("profiles").upsert(
            {
                "id": user_id,
                "name": data.name,
                "created_at": now,
                "updated_at": now,
            }
        ).execute()
    except Exception as e:
        raise UpstreamFailure("Failed to create profile.", upstream_message(e))

    logger.info(f"user_register_success email={data.email}")

    return {
        "id": user_id,
        "email": res.user.email or data.email,
        "name": data.name,
    }


@router.post("/login", response_model=UserLoginResponseModel, status_code=200)
def login_user(
    user_data: UserLoginModel,
    response: Response,
    supabase: Client = Depends(get_supabase),
):
    """
    Authenticate with email and password.

    Returns a short-lived access token; the refresh token is set in an
    HttpOnly cookie scoped to `/auth/access`.

    **Errors**
    - 401: Invalid email or password
    - 500: Supabase or internal server error
    """
    try:
        res = supabase.auth.sign_in_with_password(
            {
                "email": user_data.email,
                "password": user_data.password.get_secret_value(),
            }
        )
    except AuthApiError as error:
        raise Unauthorized("Invalid email or password.", error.message)

    if not res.session:
        raise UpstreamFailure("Supabase authentication returned an unexpected response.")

    set_refresh_cookie(response, res.session.refresh_token)

    logger.info(f"user_login_success email={user_data.email}")

    return {
        "access_token": res.session.access_token,
        "expires_in": res.session.expires_in,
        "user_id": res.user.id,
        "email": res.user.email,
    }


@router.get("/access", response_model=AccessTokenResponseModel, status_code=200)
def get_new_access(
    request: Request,
    response: Response,
    supabase: Client = Depends(get_supabase),
):
    """
    Issue a new access token using the refresh token cookie.

    If Supabase rotates the refresh token, the cookie is updated.

    **Errors**
    - 401: Missing, expired, revoked, or invalid refresh token
    """
    refresh_token = request.cookies.get(COOKIE_NAME)

    if not refresh_token:
        raise Unauthorized("No refresh token provided.")

    try:
        session = supabase.auth.refresh_session(refresh_token)
        new_refresh_token = session.session.refresh_token
        new_access_token = session.session.access_token
    except Exception as e:
        logger.info(f"refresh_failed error={e}")
        error = Unauthorized("Refresh token invalid or expired. Please log in again.")
        failed = JSONResponse(status_code=error.status_code, content=error.to_dict())
        clear_refresh_cookie(failed)
        return failed

    set_refresh_cookie(response, new_refresh_token)
    return {"access_token": new_access_token}


@router.get("/me", response_model=MeResponseModel, status_code=200)
def get_me(
    payload: dict = Depends(verify_token),
    supabase: Client = Depends(get_supabase),
):
    """
    The authenticated user: auth info, profile and admin role.

    **Returns**
    - `auth`: id & email from the access token
    - `profile`: the `profiles` row, or null when it was never created
    - `is_admin` / `role`: the caller's `admin_users` role, if any
    """
    user_id = str(payload["sub"])

    try:
        profile = get_profile(supabase, user_id)
    except NotFound:
        profile = None

    role = get_admin_role(supabase, user_id)

    return {
        "auth": {"id": user_id, "email": payload.get("email")},
        "profile": profile,
        "is_admin": role is not None,
        "role": role,
    }


@router.post("/logout")
def logout(supabase: Client = Depends(get_supabase)):
    """
    Log out by clearing the refresh token cookie. Access tokens already
    issued stay valid until they expire.
    """
    try:
        supabase.auth.sign_out()
    except Exception as e:
        logger.info(f"sign_out_failed error={e}")

    response = JSONResponse({"logged_out": True})
    clear_refresh_cookie(response)
    return response
