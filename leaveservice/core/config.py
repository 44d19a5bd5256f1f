import os
import logging
from pydantic import BaseModel, Field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class AuthSettings(BaseModel):
    jwt_secret: str = Field(default=os.getenv("JWT_SECRET", "dev-only-insecure-key-DO-NOT-USE-IN-PROD"))
    jwt_algorithms: List[str] = Field(default_factory=lambda: _env_list("JWT_ALGORITHMS", "HS256"))
    jwt_audience: Optional[str] = Field(default=os.getenv("JWT_AUDIENCE") or None)
    jwt_issuer: Optional[str] = Field(default=os.getenv("JWT_ISSUER") or None)
    # Decode tokens without checking the signature (local development only)
    allow_unverified_jwt: bool = Field(default=os.getenv("ALLOW_UNVERIFIED_JWT", "false").lower() == "true")
    webhook_secret: Optional[str] = Field(default=os.getenv("WEBHOOK_SECRET") or None)


class Config(BaseModel):
    app_name: str = "Leave Service"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./leaveservice.db")
    database_echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"

    # Auth
    auth: AuthSettings = AuthSettings()

    # Listing
    default_page_size: int = int(os.getenv("DEFAULT_PAGE_SIZE", "50"))
    max_page_size: int = int(os.getenv("MAX_PAGE_SIZE", "200"))

    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    cors_origins: List[str] = Field(
        default_factory=lambda: _env_list(
            "CORS_ORIGINS",
            "http://localhost:3000,http://localhost:3001,"
            "http://127.0.0.1:3000,http://127.0.0.1:3001",
        )
    )

    # Rate limiting
    rate_limit_enabled: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    rate_limit_per_minute: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))


settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment == "production":
    if "dev-only" in settings.auth.jwt_secret and not settings.auth.allow_unverified_jwt:
        raise RuntimeError(
            "FATAL: JWT_SECRET must be set for production. Set it as an environment variable."
        )
    if settings.auth.allow_unverified_jwt:
        _logger.warning("⚠ ALLOW_UNVERIFIED_JWT is enabled in production; token signatures are not checked.")
elif "dev-only" in settings.auth.jwt_secret:
    _logger.warning("⚠ Using insecure default JWT_SECRET; only acceptable in development.")
