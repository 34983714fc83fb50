"""
Application configuration settings
"""

import os
from typing import Annotated, Any, cast

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def coerce_comma_separated_to_list(v: Any, *, filter_empty: bool = False) -> Any:
    """
    Coerce values that may be a comma-separated string or list into a list.
    - If v is a non-JSON-looking string (doesn't start with '['), split by comma and strip items.
    - If v is already a list or a string (e.g., JSON array string), return as-is.
    - Optionally filter out empty items after stripping.
    """
    if isinstance(v, str) and not v.startswith("["):
        items = [i.strip() for i in v.split(",")]
        if filter_empty:
            items = [i for i in items if i]
        return items
    if isinstance(v, (list, set, tuple, str)):
        return cast(Any, v)
    raise ValueError(f"Invalid type for list coercion: {type(v)}")


class Settings(BaseSettings):
    """Application settings"""

    # API Configuration
    PROJECT_NAME: str = "Tracker API Server"
    DESCRIPTION: str = "Tracker API Server - multi-tenant project and task tracker"
    VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Server Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # CORS Configuration
    BACKEND_CORS_ORIGINS: Annotated[list[str], NoDecode] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Any) -> Any:
        try:
            return coerce_comma_separated_to_list(v, filter_empty=True)
        except ValueError:
            raise ValueError(f"Invalid type for CORS origins: {type(v)}")

    # Database Configuration
    # Accepts any SQLAlchemy async URL. A plain postgresql:// URL is switched to asyncpg.
    DATABASE_URL: str = "sqlite+aiosqlite:///./tracker.db"
    DATABASE_ECHO: bool = False
    # Skip create_all at startup (multi-worker deployments create the schema beforehand)
    SKIP_DB_INIT: bool = False

    @property
    def database_url(self) -> str:
        """Construct the async database URL"""
        if self.DATABASE_URL.startswith("postgresql://"):
            return self.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://", 1)
        return self.DATABASE_URL

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    # Placeholder bearer scheme: "Authorization: Bearer mock-token-for-<name>"
    AUTH_SCHEME: str = "Bearer"
    AUTH_TOKEN_PREFIX: str = "mock-token-for-"

    # First path segments that can never bind to the {user} path parameter
    RESERVED_PATH_SEGMENTS: Annotated[set[str], NoDecode] = {"login", "admin", "health"}

    @field_validator("RESERVED_PATH_SEGMENTS", mode="before")
    @classmethod
    def assemble_reserved_segments(cls, v: Any) -> Any:
        return coerce_comma_separated_to_list(v, filter_empty=True)

    # Admin API Key Configuration (up to 99 keys: ADMIN_API_KEY1 to ADMIN_API_KEY99)
    # Format: name,enabled,key (e.g., "ops-console,true,a1b2c3d4e5f6g7h8").
    # admin_api_keys will be:
    # admin_api_keys = {
    #   "a1b2c3d4e5f6g7h8": {"name": "ops-console", "enabled": True}
    # }
    # When no key is configured the /admin routes are open.
    admin_api_keys: dict[str, dict[str, str | bool]] = {}

    @model_validator(mode="before")
    @classmethod
    def parse_admin_api_keys(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Parse ADMIN_API_KEY1 through ADMIN_API_KEY99 from environment variables"""

        admin_api_keys = {}
        for i in range(1, 100):
            key_name = f"ADMIN_API_KEY{i}"
            # Read directly from os.environ first, then fallback to values
            raw_value = os.environ.get(key_name) or values.get(key_name)
            if raw_value:
                parts = [p.strip() for p in raw_value.split(",")]
                if len(parts) == 3:
                    name, enabled_str, key = parts
                    admin_api_keys[key] = {
                        "name": name,
                        "enabled": enabled_str.lower() in ("true", "1", "yes"),
                    }
        if admin_api_keys or "admin_api_keys" not in values:
            values["admin_api_keys"] = admin_api_keys
        return values

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",
    )


settings = Settings()
