"""Settings classes, one per deployment environment, selected by ``APP_ENV``.

Values come from the process environment. A ``.env`` file in the working
directory is loaded first when present.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

ENV_VAR: Final[str] = "APP_ENV"

load_dotenv()

_TRUTHY = frozenset({"1", "true", "yes", "y", "on"})


def env_bool(name: str, default: bool = False) -> bool:
    """Read a flag; ``1/true/yes/y/on`` (any case) mean ``True``."""
    raw = os.getenv(name)
    return default if raw is None else raw.strip().lower() in _TRUTHY


def env_int(name: str, default: int) -> int:
    """
    Read an integer, treating unset or blank values as ``default``.

    :raises ValueError: If the value is set but not an integer.
    """
    raw = (os.getenv(name) or "").strip()
    return int(raw) if raw else default


class BaseConfig:
    """Settings shared by every environment.

    Tokens
    ------
    ``ACCESS_TOKEN_TTL`` and ``REFRESH_TOKEN_TTL`` are duration strings such
    as ``"15m"`` or ``"7d"``. ``JWT_SECRET_KEY`` signs access tokens.

    Hashing
    -------
    ``ARGON2_*`` are the argon2id costs applied to passwords and refresh
    secrets. Memory cost is in KiB.
    """

    APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
    API_BASE_PREFIX = "/api"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    ACCESS_TOKEN_TTL = os.getenv("ACCESS_TOKEN_TTL", "15m")
    REFRESH_TOKEN_TTL = os.getenv("REFRESH_TOKEN_TTL", "7d")

    ARGON2_TIME_COST = env_int("ARGON2_TIME_COST", 3)
    ARGON2_MEMORY_COST = env_int("ARGON2_MEMORY_COST", 65536)
    ARGON2_PARALLELISM = env_int("ARGON2_PARALLELISM", 4)

    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO")

    DEBUG = False
    TESTING = False
    PROPAGATE_EXCEPTIONS = False


class DevelopmentConfig(BaseConfig):
    """Local runs: debug on unless ``FLASK_DEBUG`` says otherwise."""

    DEBUG = env_bool("FLASK_DEBUG", True)


class TestingConfig(BaseConfig):
    """Test runs: in-memory SQLite and the cheapest argon2 parameters."""

    TESTING = True
    PROPAGATE_EXCEPTIONS = True
    JWT_SECRET_KEY = "testing-jwt-secret-key-with-enough-entropy"
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    ARGON2_TIME_COST = 1
    ARGON2_MEMORY_COST = 8
    ARGON2_PARALLELISM = 1


class ProductionConfig(BaseConfig):
    """Deployed service: SQL echo is never enabled."""

    SQLALCHEMY_ECHO = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config(name: str | None = None) -> type[BaseConfig]:
    """
    Resolve a settings class by name, or from ``APP_ENV`` when ``name`` is empty.

    Unknown names resolve to :class:`DevelopmentConfig`.
    """
    key = (name or os.getenv(ENV_VAR, "development")).strip().lower()
    return CONFIG_MAP.get(key, DevelopmentConfig)
