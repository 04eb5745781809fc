"""Application factory: configuration, extensions, API blueprints, CLI."""

from __future__ import annotations

from flask import Flask

from donor_api.core.config import BaseConfig, get_config
from donor_api.core.logger import configure_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    :param config: Config class/object, a ``CONFIG_MAP`` name such as
        ``"testing"``, or ``None`` to select by ``APP_ENV``.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    settings = get_config(config) if config is None or isinstance(config, str) else config
    app.config.from_object(settings)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from donor_api import cli
    from donor_api.api import init_app as init_api
    from donor_api.core import errors, extensions, http, logger

    http.trust_proxy(app)
    extensions.init_app(app)
    logger.init_app(app)
    http.enable_cors(app)
    init_api(app)
    errors.init_app(app)
    cli.init_app(app)

    app.logger.debug("app.created", extra={"testing": app.testing})
    return app
