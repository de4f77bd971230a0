"""Application factory for the credential service."""

from __future__ import annotations

from flask import Flask

from contacts_auth.core.config import BaseConfig, get_config
from contacts_auth.core.logger import configure_logging


def _load_config(app: Flask, config: str | type[BaseConfig] | object | None, instance_file: str) -> None:
    if config is None or isinstance(config, str):
        config = get_config(config)
    app.config.from_object(config)
    if instance_file:
        # Deploy-time overrides from ``instance/<file>``, if present
        app.config.from_pyfile(instance_file, silent=True)


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """
    Build the Flask application.

    :param config: Config class or object, or an ``APP_ENV`` name such as
        ``"testing"``. ``None`` resolves ``APP_ENV`` from the environment.
    :param instance_relative_config: Resolve ``instance_config_filename``
        against the instance folder.
    :param instance_config_filename: Optional Python file with overrides.
    :returns: Configured application.
    :rtype: flask.Flask
    """
    from contacts_auth import cli
    from contacts_auth.api import init_app as init_api
    from contacts_auth.core import errors, extensions, logger

    app = Flask(__name__, instance_relative_config=instance_relative_config)
    _load_config(app, config, instance_config_filename if instance_relative_config else "")
    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    for init in (extensions.init_app, logger.init_app, init_api, errors.init_app, cli.init_app):
        init(app)
    return app
