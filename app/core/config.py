import os
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv

from app.utils.env_helper import env_bool, env_choice, env_list, env_none_or_str


load_dotenv()

SAMESITE_OPTIONS = ("lax", "strict", "none")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]


@dataclass(frozen=True)
class Settings:
    supabase_url: str | None
    supabase_key: str | None
    jwt_secret: str | None
    profile_bucket: str = "profile-photos"
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_ORIGINS))
    cookie_httponly: bool = True
    cookie_secure: bool = False
    cookie_samesite: str = "lax"
    cookie_domain: str | None = None
    log_level: str = "INFO"

    @property
    def jwt_issuer(self) -> str:
        return f"{self.supabase_url}/auth/v1"


@lru_cache
def get_settings() -> Settings:
    return Settings(
        supabase_url=os.getenv("PUBLIC_SUPABASE_URL"),
        supabase_key=os.getenv("SECRET_API_KEY"),
        jwt_secret=os.getenv("SUPABASE_JWT_SECRET"),
        profile_bucket=os.getenv("PROFILE_STORAGE_BUCKET", "profile-photos"),
        cors_origins=env_list("CORS_ORIGINS", DEFAULT_ORIGINS),
        cookie_httponly=env_bool("HTTPONLY", default=True),
        cookie_secure=env_bool("SECURE", default=False),
        cookie_samesite=env_choice("SAMESITE", SAMESITE_OPTIONS, "lax"),
        cookie_domain=env_none_or_str("COOKIE_DOMAIN", None),
        log_level=env_choice("LOG_LEVEL", LOG_LEVELS, "INFO"),
    )


def clear_settings_cache() -> None:
    get_settings.cache_clear()
