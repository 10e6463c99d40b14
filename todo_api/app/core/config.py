"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields.  The
``APP_ENV`` variable selects the environment (``development``,
``test`` or ``production``); the datastore file defaults to a
per-environment name so that test runs never touch development data.
"""

import os
from dataclasses import dataclass


DEFAULT_DATABASES = {
    "development": "todo_app.db",
    "test": "todo_app_test.db",
}


def _default_database_url(environment: str) -> str:
    return DEFAULT_DATABASES.get(environment, f"todo_app_{environment}.db")


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = "Todo API"
    api_version: str = "1.0.0"
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    log_file: str = ""
    secret_key: str = "change_me"
    access_token_expire_minutes: int = 60 * 24 * 7

    # Path to the SQLite datastore.  Relative paths are resolved against
    # the current working directory by ``core.db``.  Left empty, a
    # per-environment default is chosen in ``__post_init__``.
    database_url: str = ""

    # Minimum password length accepted at signup.
    min_password_length: int = 6

    def __post_init__(self) -> None:
        if not self.database_url:
            self.database_url = _default_database_url(self.environment)


def load_settings() -> Settings:
    """Build ``Settings`` from the current process environment."""
    return Settings(
        project_name=os.getenv("PROJECT_NAME", "Todo API"),
        api_version=os.getenv("API_VERSION", "1.0.0"),
        environment=os.getenv("APP_ENV", "development"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_file=os.getenv("LOG_FILE", ""),
        secret_key=os.getenv("SECRET_KEY", "change_me"),
        access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7))),
        database_url=os.getenv("DATABASE_URL", ""),
        min_password_length=int(os.getenv("MIN_PASSWORD_LENGTH", "6")),
    )


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# should be set before importing this module.
settings = load_settings()
