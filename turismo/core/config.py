import os
from typing import Optional, List
from functools import lru_cache


VALIDATION_MODES = ("lenient", "strict")


class Settings:
    """Application settings following Single Responsibility Principle"""

    # Database
    DB_DSN: str = os.getenv("DB_DSN", "")
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "5"))
    DB_ECHO: bool = os.getenv("DB_ECHO", "false").lower() == "true"
    DB_CREATE_ALL: bool = os.getenv("DB_CREATE_ALL", "true").lower() == "true"

    # Security
    SECRET_KEY: str = os.getenv("SECRET_KEY", "")
    ALGORITHM: str = "HS256"
    JWT_ISSUER: str = os.getenv("JWT_ISSUER", "turismo-api")
    JWT_AUDIENCE: str = os.getenv("JWT_AUDIENCE", "turismo-frontend")
    ACCESS_TOKEN_EXPIRE_SECONDS: int = int(os.getenv("JWT_ACCESS_TTL", str(60 * 60 * 8)))  # 8 hours
    REFRESH_TOKEN_EXPIRE_SECONDS: int = int(os.getenv("JWT_REFRESH_TTL", str(60 * 60 * 24 * 7)))  # 7 days
    COOKIE_SECURE: bool = os.getenv("COOKIE_SECURE", "false").lower() == "true"
    COOKIE_DOMAIN: Optional[str] = os.getenv("COOKIE_DOMAIN") or None

    # CORS
    CORS_ALLOW_ORIGINS: List[str] = []
    CORS_ALLOW_CREDENTIALS: bool = True

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    RATE_LIMIT_DEFAULT: str = os.getenv("RATE_LIMIT_DEFAULT", "100/minute")
    RATE_LIMIT_LOGIN: str = os.getenv("RATE_LIMIT_LOGIN", "30/minute")
    RATE_LIMIT_CONTACT: str = os.getenv("RATE_LIMIT_CONTACT", "10/minute")

    # Business Rules
    BUSINESS_TIMEZONE: str = os.getenv("BUSINESS_TIMEZONE", "America/Lima")
    VALIDATION_MODE: str = os.getenv("VALIDATION_MODE", "lenient").lower()
    PUBLIC_BASE_URL: str = os.getenv("PUBLIC_BASE_URL", "").rstrip("/")

    # Storage
    S3_ENDPOINT: str = os.getenv("S3_ENDPOINT", "")
    S3_ACCESS_KEY: str = os.getenv("S3_ACCESS_KEY", "")
    S3_SECRET_KEY: str = os.getenv("S3_SECRET_KEY", "")
    S3_BUCKET: str = os.getenv("S3_BUCKET", "turismo")
    S3_REGION: str = os.getenv("S3_REGION", "")
    S3_SECURE: bool = os.getenv("S3_SECURE", "false").lower() == "true"
    PUBLIC_S3_ENDPOINT: str = os.getenv("PUBLIC_S3_ENDPOINT", "")

    # Mail
    SMTP_HOST: str = os.getenv("SMTP_HOST", "")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USER: str = os.getenv("SMTP_USER", "")
    SMTP_PASS: str = os.getenv("SMTP_PASS", "")
    SMTP_FROM: str = os.getenv("SMTP_FROM", "")
    SMTP_REPLY_TO: str = os.getenv("SMTP_REPLY_TO", "")
    CONTACT_TO: str = os.getenv("CONTACT_TO") or os.getenv("ADMIN_EMAIL", "admin@turismo.pe")
    CONTACT_BCC: List[str] = [s.strip() for s in os.getenv("CONTACT_BCC", "").split(",") if s.strip()]
    BRAND_NAME: str = os.getenv("BRAND_NAME", "Turismo Perú")
    COMPANY_NAME: str = os.getenv("COMPANY_NAME", "") or os.getenv("BRAND_NAME", "Turismo Perú")

    # Seed admin
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "")
    ADMIN_NAME: str = os.getenv("ADMIN_NAME", "Admin")
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "")
    ADMIN_FORCE_PROMOTE: bool = os.getenv("ADMIN_FORCE_PROMOTE", "").strip() == "1"
    ADMIN_RESET_PASSWORD: bool = os.getenv("ADMIN_RESET_PASSWORD", "").strip() == "1"

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    def __init__(self):
        self._validate()
        self._parse_cors_origins()

    def _validate(self):
        """Validate required settings"""
        if not self.SECRET_KEY:
            raise ValueError("SECRET_KEY environment variable must be set")
        if not self.DB_DSN:
            raise ValueError("DB_DSN environment variable must be set")
        if self.VALIDATION_MODE not in VALIDATION_MODES:
            raise ValueError(f"VALIDATION_MODE must be one of: {', '.join(VALIDATION_MODES)}")

    def _parse_cors_origins(self):
        """Parse CORS origins from environment"""
        raw_origins = os.getenv("CORS_ALLOW_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")

        if raw_origins.strip() == "*":
            self.CORS_ALLOW_ORIGINS = ["*"]
            self.CORS_ALLOW_CREDENTIALS = False  # Security: wildcard forbids credentials
        else:
            self.CORS_ALLOW_ORIGINS = [o.strip().rstrip("/") for o in raw_origins.split(",") if o.strip()]
            self.CORS_ALLOW_CREDENTIALS = True

    @property
    def smtp_configured(self) -> bool:
        return bool(self.SMTP_HOST and self.SMTP_USER and self.SMTP_PASS)

    @property
    def strict_validation(self) -> bool:
        return self.VALIDATION_MODE == "strict"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
