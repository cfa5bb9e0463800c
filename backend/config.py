"""Production configuration and environment settings"""

import os
from typing import List


class Config:
    """Application configuration from environment variables"""

    # Environment
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
    IS_PRODUCTION = ENVIRONMENT == "production"

    # CORS Configuration
    ALLOWED_ORIGINS: List[str] = []
    allowed_origins_env = os.getenv("ALLOWED_ORIGINS")
    if allowed_origins_env:
        ALLOWED_ORIGINS = [origin.strip() for origin in allowed_origins_env.split(",")]
    elif not IS_PRODUCTION:
        # Development fallback - but warn about it
        ALLOWED_ORIGINS = ["*"]

    # Document store configuration
    USE_POSTGRES = os.getenv("USE_POSTGRES", "false").lower() == "true"
    DATABASE_URL = os.getenv("DATABASE_URL")
    SQLITE_PATH = os.getenv("SQLITE_PATH", "findora.db")

    # Retrieval
    STORE_TIMEOUT_SECONDS = float(os.getenv("STORE_TIMEOUT_SECONDS", "3.0"))
    MAX_SCAN = int(os.getenv("MAX_SCAN", "500"))  # Documents read per store batch when listing

    # API Keys (validated at startup)
    ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
    ANTHROPIC_MODEL = os.getenv("ANTHROPIC_MODEL", "claude-3-haiku-20240307")
    ADMIN_API_KEY = os.getenv("ADMIN_API_KEY")
    REDDIT_CLIENT_ID = os.getenv("REDDIT_CLIENT_ID")
    REDDIT_CLIENT_SECRET = os.getenv("REDDIT_CLIENT_SECRET")

    # Rate Limiting
    RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    CHAT_RATE_LIMIT = os.getenv("CHAT_RATE_LIMIT", "30/minute")
    SEARCH_RATE_LIMIT = os.getenv("SEARCH_RATE_LIMIT", "20/minute")
    WORKFLOW_RATE_LIMIT = os.getenv("WORKFLOW_RATE_LIMIT", "10/minute")

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    STRUCTURED_LOGGING = os.getenv("STRUCTURED_LOGGING", "true").lower() == "true"

    def validate(self):
        """Validate critical configuration at startup"""
        errors = []

        if self.IS_PRODUCTION and not self.ALLOWED_ORIGINS:
            errors.append("ALLOWED_ORIGINS must be set in production")

        if self.USE_POSTGRES and not self.DATABASE_URL:
            errors.append("DATABASE_URL must be set when USE_POSTGRES=true")

        if self.STORE_TIMEOUT_SECONDS <= 0:
            errors.append("STORE_TIMEOUT_SECONDS must be positive")

        if self.IS_PRODUCTION and not self.ADMIN_API_KEY:
            errors.append("ADMIN_API_KEY must be set in production")

        return errors

    def validate_for_jobs(self, needs_reddit: bool = False):
        """Validate credentials needed by the out-of-band enrichment jobs"""
        errors = []

        if not self.ANTHROPIC_API_KEY:
            errors.append("ANTHROPIC_API_KEY is required for enrichment jobs")

        if needs_reddit and not (self.REDDIT_CLIENT_ID and self.REDDIT_CLIENT_SECRET):
            errors.append("REDDIT_CLIENT_ID and REDDIT_CLIENT_SECRET are required for mention collection")

        if self.USE_POSTGRES and not self.DATABASE_URL:
            errors.append("DATABASE_URL must be set when USE_POSTGRES=true")

        return errors

    def get_summary(self) -> dict:
        """Get configuration summary for logging (without secrets)"""
        return {
            "environment": self.ENVIRONMENT,
            "use_postgres": self.USE_POSTGRES,
            "store_timeout_seconds": self.STORE_TIMEOUT_SECONDS,
            "rate_limit_enabled": self.RATE_LIMIT_ENABLED,
            "cors_origins_count": len(self.ALLOWED_ORIGINS),
            "llm_enabled": bool(self.ANTHROPIC_API_KEY),
            "structured_logging": self.STRUCTURED_LOGGING,
        }


config = Config()
