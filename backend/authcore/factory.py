"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

import logging

from flask import Flask

from authcore.core.config import DEFAULT_JWT_SECRET, BaseConfig, get_config
from authcore.core.logger import configure_logging, init_app as init_logging

log = logging.getLogger(__name__)


def _check_secrets(app: Flask) -> None:
    """Guard against signing tokens with the placeholder JWT secret.

    Under ``DEBUG`` the placeholder is tolerated with a warning; otherwise,
    unless ``TESTING``, the factory refuses to build the app.
    """
    if app.config.get("TESTING"):
        return
    if app.config.get("JWT_SECRET_KEY", DEFAULT_JWT_SECRET) != DEFAULT_JWT_SECRET:
        return
    if not app.config.get("DEBUG"):
        raise RuntimeError("JWT_SECRET_KEY must be set to a real secret outside development.")
    log.warning(
        "JWT_SECRET_KEY is the placeholder value; access tokens are forgeable. "
        "Set APP_ENV and JWT_SECRET_KEY for any shared deployment."
    )


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application."""

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    # Keep payload keys in declaration order
    app.json.sort_keys = False  # type: ignore[attr-defined]

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))
    _check_secrets(app)

    # Proxy headers if running behind a reverse proxy
    from authcore.core import proxy

    proxy.init_app(app)

    from authcore.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from authcore.core import cors

    cors.init_app(app)

    from authcore.api import init_app as init_api

    init_api(app)

    from authcore.core import errors

    errors.init_app(app)

    from authcore import cli as app_cli

    app_cli.init_app(app)

    from authcore.core import container

    container.init_app(app)

    return app
