"""Settings for the auth service, read from the environment at import time.

Three classes cover development, testing and production; ``APP_ENV`` picks
one. :func:`validate_config` runs at startup and refuses weak secrets or
nonsensical timeouts before any request is served.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, Final

from dotenv import load_dotenv

ENV_VAR: Final[str] = "APP_ENV"

# Load .env in development (no-op when the file is absent)
load_dotenv()

TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "y", "on"})

JWT_SECRET_MIN_LENGTH: Final[int] = 32
JWT_SECRET_MAX_LENGTH: Final[int] = 512
SUPPORTED_JWT_ALGORITHMS: Final[frozenset[str]] = frozenset({"HS256"})

# Substrings that disqualify a production secret (compared lower-cased).
WEAK_SECRET_WORDS: Final[tuple[str, ...]] = (
    "change-me-in-production",
    "change-me",
    "secret",
    "password",
    "algoshield_secret",
    "default",
    "test",
    "12345678",
)


class ConfigError(RuntimeError):
    """Raised by :func:`validate_config` when the settings cannot be used."""


def env_bool(name: str, default: bool = False) -> bool:
    """Read a flag such as ``TLS_ENABLE=yes``; unset returns ``default``."""
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in TRUTHY


def env_int(name: str, default: int) -> int:
    """Parse an integer environment variable, falling back to ``default``.

    :raises ConfigError: If the variable is set but not an integer.
    """
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    try:
        return int(val)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {val!r}") from exc


def env_optional_int(name: str) -> int | None:
    val = os.getenv(name)
    if val is None or not val.strip():
        return None
    return env_int(name, 0)


def _redis_url_from_env() -> str:
    url = os.getenv("REDIS_URL")
    if url:
        return url
    host = os.getenv("REDIS_HOST", "localhost")
    port = os.getenv("REDIS_PORT", "6379")
    db_index = os.getenv("REDIS_DB", "0")
    return f"redis://{host}:{port}/{db_index}"


def build_engine_options(uri: str, timeout_seconds: int) -> dict[str, Any]:
    """Return ``SQLALCHEMY_ENGINE_OPTIONS`` enforcing per-operation deadlines.

    SQLite (used by tests) gets no pool options; PostgreSQL additionally gets
    a connect timeout and a server-side ``statement_timeout``.

    :param uri: Database URI.
    :param timeout_seconds: Deadline applied to pool checkout and statements.
    :returns: Engine keyword arguments.
    """
    if uri.startswith("sqlite"):
        return {}
    options: dict[str, Any] = {"pool_pre_ping": True, "pool_timeout": timeout_seconds}
    if uri.startswith("postgresql"):
        options["connect_args"] = {
            "connect_timeout": timeout_seconds,
            "options": f"-c statement_timeout={timeout_seconds * 1000}",
        }
    return options


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    JWT_SECRET: str | None
        Process-wide HMAC secret for bearer tokens. Required.
    JWT_EXPIRATION_HOURS: int
        Token lifetime in hours.
    JWT_REVOCATION_HORIZON_HOURS: int | None
        TTL of principal-wide revocation entries; defaults to (and is
        clamped up to) the token lifetime.
    JWT_ALGORITHM: str
        Pinned MAC algorithm; only ``HS256`` is accepted.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    REDIS_URL: str | None
        Revocation store address. ``None`` disables the Redis client.
    SIDE_CHANNEL_TIMEOUT_SECONDS / HEALTH_TIMEOUT_SECONDS / DB_TIMEOUT_SECONDS: int
        Per-operation deadlines.
    TLS_ENABLE / TLS_CERT_PATH / TLS_KEY_PATH:
        TLS settings handed to the WSGI server; required in production.
    PASSWORD_HASH_METHOD: str
        werkzeug hashing method including its work factor.
    AUTH_LOGIN_RATE_LIMIT: str
        Flask-Limiter expression applied to ``POST /auth/login``.
    AUTH_HIDE_INACTIVE_ON_LOGIN: bool
        Report inactive users as invalid credentials at login.
    REVOCATION_FAIL_CLOSED: bool
        Fail validation when the revocation store cannot be read.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    APP_ENV = "base"
    API_BASE_PREFIX = "/api"

    # Secrets / tokens
    JWT_SECRET = os.getenv("JWT_SECRET")
    JWT_EXPIRATION_HOURS = env_int("JWT_EXPIRATION_HOURS", 24)
    JWT_REVOCATION_HORIZON_HOURS = env_optional_int("JWT_REVOCATION_HORIZON_HOURS")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    DB_TIMEOUT_SECONDS = env_int("DB_TIMEOUT_SECONDS", 5)
    SQLALCHEMY_ENGINE_OPTIONS = build_engine_options(SQLALCHEMY_DATABASE_URI, DB_TIMEOUT_SECONDS)

    # Revocation store
    REDIS_URL: str | None = _redis_url_from_env()
    SIDE_CHANNEL_TIMEOUT_SECONDS = env_int("SIDE_CHANNEL_TIMEOUT_SECONDS", 5)
    HEALTH_TIMEOUT_SECONDS = env_int("HEALTH_TIMEOUT_SECONDS", 2)

    # TLS
    TLS_ENABLE = env_bool("TLS_ENABLE", False)
    TLS_CERT_PATH = os.getenv("TLS_CERT_PATH")
    TLS_KEY_PATH = os.getenv("TLS_KEY_PATH")

    # Auth policy
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")
    AUTH_LOGIN_RATE_LIMIT = os.getenv("AUTH_LOGIN_RATE_LIMIT", "5 per minute")
    AUTH_HIDE_INACTIVE_ON_LOGIN = env_bool("AUTH_HIDE_INACTIVE_ON_LOGIN", False)
    REVOCATION_FAIL_CLOSED = env_bool("REVOCATION_FAIL_CLOSED", False)

    # Rate limiting (Flask-Limiter)
    RATELIMIT_ENABLED = env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_HEADERS_ENABLED = True

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default; error envelopes carry ``details``.
    """

    APP_ENV = "development"
    DEBUG = env_bool("FLASK_DEBUG", True)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Leaves Redis unset; tests inject a fakeredis-backed registry.
    - Uses a cheap PBKDF2 work factor and disables rate limiting.
    """

    APP_ENV = "testing"
    TESTING = True
    DEBUG = False
    JWT_SECRET = "k3Y!9vQz#L2m@Xw8$Rt5^Np1&Hs6*Jd4"
    JWT_EXPIRATION_HOURS = 24
    JWT_REVOCATION_HORIZON_HOURS = None
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ENGINE_OPTIONS: dict[str, Any] = {}
    REDIS_URL = None
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    RATELIMIT_ENABLED = False
    AUTH_HIDE_INACTIVE_ON_LOGIN = False
    REVOCATION_FAIL_CLOSED = False
    TLS_ENABLE = False


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    TLS is mandatory and the JWT secret must pass the strength checks.
    """

    APP_ENV = "production"
    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Pick the config class named by ``APP_ENV`` (development when unknown)."""
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


# --------------------------------------------------------------------------- #
# Validation
# --------------------------------------------------------------------------- #


def has_repeated_pattern(value: str, window: int = 4) -> bool:
    """Detect runs of ``window`` identical or consecutive characters.

    ``aaaa``, ``1234`` and ``dcba`` all match.

    :param value: String to inspect.
    :param window: Run length that counts as a pattern.
    :returns: ``True`` when such a run exists.
    """
    for start in range(len(value) - window + 1):
        chunk = value[start : start + window]
        if len(set(chunk)) == 1:
            return True
        steps = {ord(b) - ord(a) for a, b in zip(chunk, chunk[1:], strict=False)}
        if steps == {1} or steps == {-1}:
            return True
    return False


def validate_secret_strength(secret: str) -> list[str]:
    """Return the production strength problems of a JWT secret.

    :param secret: Candidate secret.
    :returns: Human-readable problems; empty when the secret is acceptable.
    """
    problems: list[str] = []
    lowered = secret.lower()
    for word in WEAK_SECRET_WORDS:
        if word in lowered:
            problems.append(f"JWT_SECRET contains a weak or default value ({word!r})")
            break

    classes = sum(
        (
            any(c.isupper() for c in secret),
            any(c.islower() for c in secret),
            any(c.isdigit() for c in secret),
            any(not c.isalnum() for c in secret),
        )
    )
    if classes < 3:
        problems.append(
            "JWT_SECRET must mix at least 3 of: uppercase, lowercase, digits, special characters"
        )
    if has_repeated_pattern(secret):
        problems.append("JWT_SECRET contains repeated or sequential character runs")
    return problems


def validate_config(config: Mapping[str, Any]) -> None:
    """Validate loaded settings; abort startup on the first batch of problems.

    :param config: Flask config mapping (or any mapping with the same keys).
    :raises ConfigError: Listing every problem found.
    """
    problems: list[str] = []
    env = str(config.get("APP_ENV", "development"))
    production = env == "production"

    secret = config.get("JWT_SECRET")
    if not secret:
        problems.append("JWT_SECRET is required")
    elif len(secret) < JWT_SECRET_MIN_LENGTH:
        problems.append(f"JWT_SECRET must be at least {JWT_SECRET_MIN_LENGTH} characters")
    elif len(secret) > JWT_SECRET_MAX_LENGTH:
        problems.append(f"JWT_SECRET must be at most {JWT_SECRET_MAX_LENGTH} characters")
    elif production:
        problems.extend(validate_secret_strength(secret))

    if config.get("JWT_ALGORITHM", "HS256") not in SUPPORTED_JWT_ALGORITHMS:
        problems.append("JWT_ALGORITHM must be HS256")

    for key in ("JWT_EXPIRATION_HOURS", "SIDE_CHANNEL_TIMEOUT_SECONDS", "HEALTH_TIMEOUT_SECONDS", "DB_TIMEOUT_SECONDS"):
        value = config.get(key)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            problems.append(f"{key} must be a positive integer")

    horizon = config.get("JWT_REVOCATION_HORIZON_HOURS")
    if horizon is not None and (isinstance(horizon, bool) or not isinstance(horizon, int) or horizon <= 0):
        problems.append("JWT_REVOCATION_HORIZON_HOURS must be a positive integer")

    if not config.get("SQLALCHEMY_DATABASE_URI"):
        problems.append("DATABASE_URL is required")

    tls_enabled = bool(config.get("TLS_ENABLE"))
    if production and not tls_enabled:
        problems.append("TLS_ENABLE must be true in production")
    if tls_enabled:
        if not config.get("TLS_CERT_PATH"):
            problems.append("TLS_CERT_PATH is required when TLS is enabled")
        if not config.get("TLS_KEY_PATH"):
            problems.append("TLS_KEY_PATH is required when TLS is enabled")

    if problems:
        raise ConfigError("Invalid configuration: " + "; ".join(problems))
