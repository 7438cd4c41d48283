from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field

from models.enums import Role


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Pass21 Access API"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # -------------------------------------------------
    # Frontend Domains (CORS)
    # -------------------------------------------------
    FRONTEND_DOMAINS: List[str] = [
        "http://localhost:3000",
    ]

    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (Identity provider + profile store)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None

    # Table holding persisted profiles (id = auth user id)
    PROFILES_TABLE: str = "users"

    # -------------------------------------------------
    # Client-side session + guards
    # -------------------------------------------------
    # Storage key for the persisted access token
    AUTH_TOKEN_KEY: str = "auth_token"
    AUTH_REFRESH_TOKEN_KEY: str = "auth_refresh_token"

    # Debug escape hatch. The storage key is only consulted when the
    # flag is on, and the flag is forced off in production below.
    AUTH_BYPASS_ENABLED: bool = False
    AUTH_BYPASS_KEY: str = "pass21_auth_bypass"

    LOGIN_PATH: str = "/login"
    UNAUTHORIZED_PATH: str = "/unauthorized"

    # -------------------------------------------------
    # Account management
    # -------------------------------------------------
    # Must be one of the Role values; rejected at load time otherwise
    SYNC_DEFAULT_ROLE: Role = Role.RESIDENT
    TEMP_PASSWORD_LENGTH: int = Field(8, description="Random characters in generated temporary secrets")

    # -------------------------------------------------
    # Rate limits (requests per window)
    # -------------------------------------------------
    LOGIN_RATE_LIMIT: int = 10
    LOGIN_RATE_WINDOW_SECONDS: int = 300
    PASSWORD_RESET_RATE_LIMIT: int = 5
    PASSWORD_RESET_RATE_WINDOW_SECONDS: int = 900

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list dynamically after loading settings
# -------------------------------------------------
cors_origins = list(settings.BACKEND_CORS_ORIGINS)
cors_origins.extend([d.rstrip("/") for d in settings.FRONTEND_DOMAINS])
settings.BACKEND_CORS_ORIGINS = sorted(list(set(cors_origins)))

# Never allow the bypass flag in a production build
if settings.ENV == "production":
    settings.AUTH_BYPASS_ENABLED = False
