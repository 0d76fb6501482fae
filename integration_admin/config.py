"""Integration admin configuration via pydantic-settings."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class AdminSettings(BaseSettings):
    environment: str = "development"
    database_url: str = "sqlite+aiosqlite:///integration_admin.db"
    echo_sql: bool = False
    app_title: str = "Integration Admin"
    log_level: str = "INFO"

    # HTTP gateway (editor talking to a remote admin API)
    api_base_url: str = "http://localhost:8030"
    request_timeout_seconds: float = 30.0

    # Editor behaviour
    # Re-fetch a tier after a successful save so backend-assigned keys show up.
    refresh_after_save: bool = True
    default_field_data_type: str = "String"

    model_config = {"env_prefix": "INTADMIN_", "env_file": ".env", "extra": "ignore"}

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in {"prod", "production"}


settings = AdminSettings()
