"""Bridge settings.

Values come from OS environment variables first, then from the first env
file found among ``$BRIDGE_ENV_FILE``, ``config/.env.dev`` and ``config/.env``.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _project_root() -> Path:
    here = Path(__file__).resolve().parent
    for parent in [here, *here.parents]:
        if (parent / "config").is_dir() or (parent / "pyproject.toml").is_file():
            return parent
    return here.parents[1]


def get_config_dir() -> Path:
    return _project_root() / "config"


def _resolve_env_file_path() -> Path | None:
    candidates: list[Path] = []
    explicit = os.environ.get("BRIDGE_ENV_FILE")
    if explicit:
        path = Path(explicit)
        candidates.append(path if path.is_absolute() else _project_root() / path)
    candidates += [get_config_dir() / ".env.dev", get_config_dir() / ".env"]

    return next((path for path in candidates if path.is_file()), None)


def _split_csv(v: Any) -> str:
    if isinstance(v, (list, tuple, set, frozenset)):
        return ",".join(str(item) for item in v)
    return str(v) if v else ""


class Settings(BaseSettings):
    """Secrets, database location, signature window, retry and policy knobs."""

    model_config = SettingsConfigDict(
        env_file=_resolve_env_file_path(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Required
    bridge_shared_secret: SecretStr  # HMAC secret shared with the auth provider
    jwt_secret_key: SecretStr  # Secret for signing local API access tokens
    postgres_password: SecretStr  # Database password

    # Application
    app_name: str = "Identity Bridge"
    debug: bool = False

    # Local store database (POSTGRES_ prefix)
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_db: str = "bridge"

    # Provider store database, same server. None = share the local database
    provider_postgres_db: str | None = None

    # API (API_ prefix)
    api_debug: bool = False
    api_cors_origins: str = ""  # Empty = no CORS allowed (secure default)
    api_cookie_secure: bool = True
    api_cookie_samesite: Literal["lax", "strict", "none"] = "strict"
    api_cookie_domain: str | None = None

    # Signed requests
    signature_window_seconds: int = 300

    # JWT
    jwt_access_token_expire_hours: int = 1

    # Sessions
    session_ttl_hours: int = 24

    # Auth provider API (outbound)
    provider_api_url: str = "http://localhost:5173/api/auth"
    provider_api_timeout: float = 5.0
    provider_api_secret: SecretStr | None = None  # Falls back to shared secret

    # Retry behaviour
    token_lookup_attempts: int = 3
    token_lookup_delay_seconds: float = 0.5
    resync_attempts: int = 3
    resync_base_delay_seconds: float = 1.0

    # Auto-sync policy
    locked_roles: str = ""
    default_auto_sync_roles: str = "administrator"

    # Logging (LOG_ prefix)
    log_level: str = "INFO"

    @field_validator(
        "api_cors_origins",
        "locked_roles",
        "default_auto_sync_roles",
        mode="before",
    )
    @classmethod
    def _validate_csv(cls, v: Any) -> str:
        """Ensure list-like values are stored as comma-separated strings."""
        return _split_csv(v)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def database_url(self) -> str:
        """Construct the local store database URL from components."""
        return self._postgres_url(self.postgres_db)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def provider_database_url(self) -> str:
        """Construct the provider store database URL."""
        return self._postgres_url(self.provider_postgres_db or self.postgres_db)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [o.strip() for o in self.api_cors_origins.split(",") if o.strip()]

    @property
    def locked_role_set(self) -> frozenset[str]:
        return _parse_roles(self.locked_roles)

    @property
    def default_auto_sync_role_set(self) -> frozenset[str]:
        return _parse_roles(self.default_auto_sync_roles)

    @property
    def provider_signing_secret(self) -> str:
        secret = self.provider_api_secret or self.bridge_shared_secret
        return secret.get_secret_value()

    def _postgres_url(self, db_name: str) -> str:
        return (
            f"postgresql+asyncpg://{self.postgres_user}:"
            f"{self.postgres_password.get_secret_value()}"
            f"@{self.postgres_host}:{self.postgres_port}/{db_name}"
        )


def _parse_roles(value: str) -> frozenset[str]:
    return frozenset(r.strip().lower() for r in value.split(",") if r.strip())


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings, cached after the first call."""
    return Settings()  # type: ignore[call-arg]  # pydantic-settings loads from env


def clear_settings_cache() -> None:
    get_settings.cache_clear()
