"""Application factory for the AlgoShield auth service."""

from __future__ import annotations

from flask import Flask

from algoshield.core.config import BaseConfig, get_config, validate_config
from algoshield.core.logger import configure_logging
from algoshield.services._shared.ports import RevocationRegistry


def _load_config(
    app: Flask, config: str | type[BaseConfig] | object | None, instance_file: str | None
) -> None:
    app.config.from_object(config if config is not None else get_config())
    if instance_file:
        app.config.from_pyfile(instance_file, silent=True)
    validate_config(app.config)


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    revocation_registry: RevocationRegistry | None = None,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build a configured application.

    Startup stops with :class:`~algoshield.core.config.ConfigError` when the
    signing secret or the timeouts are invalid, so a misconfigured process
    never serves a request.

    :param config: Config class, instance or import path; ``None`` selects
        one from ``APP_ENV``.
    :param revocation_registry: Registry to use instead of the Redis-backed
        one built from ``REDIS_URL``.
    :param instance_relative_config: Also read ``instance/<filename>``.
    :param instance_config_filename: Optional per-deployment override file.
    """
    app = Flask(__name__, instance_relative_config=instance_relative_config)
    _load_config(app, config, instance_config_filename if instance_relative_config else None)
    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from algoshield import cli
    from algoshield.api import init_app as init_api
    from algoshield.core import cors, errors, extensions, logger, security

    extensions.init_app(app)
    logger.init_app(app)
    cors.init_app(app)
    security.init_app(app, registry=revocation_registry)
    init_api(app)
    errors.init_app(app)
    cli.init_app(app)

    return app
