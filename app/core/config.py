"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. DATABASE_URL is validated at load time when the
postgres backend is selected.
"""

from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults except database_url, which is
    required when database_backend is 'postgres'.
    """

    # App
    app_name: str = "managekar"
    app_version: str = "1.0.0"
    debug: bool = False

    # Database: "postgres" (SQLAlchemy + asyncpg) or "memory" (no SQL engine; tests)
    database_backend: str = "postgres"
    database_url: str = ""
    database_echo: bool = False
    # Optional pool/driver overrides (None = use defaults in database.py)
    db_pool_size: int | None = None
    db_max_overflow: int | None = None
    db_command_timeout: int | None = None
    db_disable_jit: bool = True

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Request context: identity is supplied by the auth collaborator in front of this service
    workspace_header_name: str = "X-Workspace-ID"
    actor_id_header: str = "X-Actor-ID"
    actor_type_header: str = "X-Actor-Type"
    request_id_header: str = "X-Request-ID"

    # Notifications
    whatsapp_link_base: str = "https://wa.me"
    default_country_code: str = "91"
    notification_queue_enabled: bool = True

    # Audit
    audit_query_max_limit: int = 500

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_database(self) -> "Settings":
        """Validate the database backend.

        - Postgres: DATABASE_URL required.
        - Memory: no SQL engine; endpoints that need one answer 503.
        """
        if self.database_backend == "postgres":
            if not self.database_url:
                raise ValueError(
                    "DATABASE_URL is required when database_backend is 'postgres'. "
                    "Set in environment or .env file."
                )
        elif self.database_backend != "memory":
            raise ValueError(
                f"database_backend must be 'postgres' or 'memory', got: {self.database_backend!r}"
            )
        if not self.whatsapp_link_base.startswith("https://"):
            raise ValueError("WHATSAPP_LINK_BASE must be an https:// URL")
        if not self.default_country_code.isdigit():
            raise ValueError("DEFAULT_COUNTRY_CODE must contain digits only")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
