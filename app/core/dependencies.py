import logging

import jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from supabase import Client

from app.core.config import get_settings
from app.core.errors import Forbidden, Unauthorized, UpstreamFailure, upstream_message
from app.core.supabase_client import get_supabase


logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

ADMIN_ROLES = ("superadmin", "admin")


def verify_token(credentials: HTTPAuthorizationCredentials | None = Depends(security)):
    """Decode the Supabase access token sent as ``Authorization: Bearer``."""
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Missing bearer token.")

    settings = get_settings()

    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.jwt_secret,
            algorithms=["HS256"],
            issuer=settings.jwt_issuer,
            options={"verify_aud": False},
            leeway=60,
        )
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token expired")
    except jwt.InvalidTokenError as e:
        logger.info(f"jwt_verification_failed error={e}")
        raise Unauthorized("Invalid token")

    if not payload.get("sub"):
        raise Unauthorized("Invalid token")

    return payload


def get_current_user_id(payload: dict = Depends(verify_token)) -> str:
    return str(payload["sub"])


def get_admin_role(supabase: Client, user_id: str) -> str | None:
    try:
        result = (
            supabase.table("admin_users")
            .select("role")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise UpstreamFailure("Failed to verify admin role.", upstream_message(e))

    if not result.data:
        return None
    return result.data[0].get("role")


def require_admin(
    user_id: str = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
) -> dict:
    role = get_admin_role(supabase, user_id)
    if role not in ADMIN_ROLES:
        raise Forbidden()
    return {"user_id": user_id, "role": role}


def require_superadmin(admin: dict = Depends(require_admin)) -> dict:
    if admin["role"] != "superadmin":
        raise Forbidden()
    return admin
