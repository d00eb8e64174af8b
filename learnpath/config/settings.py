"""
learnpath/config/settings.py
Application settings

All settings are loaded from environment variables (optionally via a .env
file at the project root). Values are read once at import time.
"""
import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
ENV_FILE = PROJECT_ROOT / ".env"

load_dotenv(dotenv_path=ENV_FILE, override=False)

DEV_SECRET_KEY = "dev-secret-key-change-in-production"

DEFAULT_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]


def get_bool_env(key: str, default: bool = False) -> bool:
    """Get a boolean value from environment variable."""
    value = os.getenv(key, str(default)).lower()
    return value in ('true', '1', 'yes', 'on', 'enabled')


def get_int_env(key: str, default: int) -> int:
    """Get an integer value from environment variable, falling back on garbage."""
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def get_list_env(key: str) -> List[str]:
    """Comma separated list, empty entries dropped."""
    return [item.strip() for item in os.getenv(key, "").split(",") if item.strip()]


class Settings:
    """
    Runtime configuration.

    To add a new setting:
    1. Add it here as a class attribute
    2. Load it from an environment variable
    3. Import `settings` where you need it
    """

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = get_int_env("PORT", 8000)
    API_PREFIX: str = os.getenv("API_PREFIX", "/api")
    ALLOWED_ORIGINS: List[str] = DEFAULT_ORIGINS + get_list_env("ALLOWED_ORIGINS")

    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./learnpath.db")
    DATABASE_ECHO: bool = get_bool_env("DATABASE_ECHO", False)

    # Auth
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", DEV_SECRET_KEY)
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = get_int_env("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24 * 7)
    BCRYPT_ROUNDS: int = get_int_env("BCRYPT_ROUNDS", 10)

    # Rate limiting (slowapi)
    RATE_LIMIT_ENABLED: bool = get_bool_env("RATE_LIMIT_ENABLED", True)
    AUTH_RATE_LIMIT: str = os.getenv("AUTH_RATE_LIMIT", "10/minute")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    def validate(self) -> None:
        """Refuse insecure production configuration."""
        if self.is_production and self.JWT_SECRET_KEY == DEV_SECRET_KEY:
            raise EnvironmentError("JWT_SECRET_KEY must be set in production")

    def masked(self) -> dict:
        """All settings as a dict with secrets hidden, for diagnostics."""
        values = {
            key: value
            for key, value in type(self).__dict__.items()
            if key.isupper()
        }
        values["JWT_SECRET_KEY"] = "***"
        if "@" in values["DATABASE_URL"]:
            scheme, _, rest = values["DATABASE_URL"].partition("://")
            values["DATABASE_URL"] = f"{scheme}://***@{rest.split('@', 1)[1]}"
        return values


# Singleton instance for easy importing
settings = Settings()
