import os
import time

import jwt


def make_token(user_id: str, email: str | None = None, expires_in: int = 3600, **claims) -> str:
    """A Supabase-style access token signed with the test secret."""
    now = int(time.time())
    payload = {
        "sub": user_id,
        "email": email or f"{user_id}@soulmatch.test",
        "iss": f"{os.environ['PUBLIC_SUPABASE_URL']}/auth/v1",
        "aud": "authenticated",
        "iat": now,
        "exp": now + expires_in,
        **claims,
    }
    return jwt.encode(payload, os.environ["SUPABASE_JWT_SECRET"], algorithm="HS256")


def auth_headers(user_id: str, **kwargs) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, **kwargs)}"}
