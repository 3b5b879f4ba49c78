from __future__ import annotations

from flask import Flask

from .api_handler import build_registry
from .config import Config
from .services.generation import EXTENSION_KEY, GenerationService


def create_app(config_class: type[Config] = Config) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_class)

    register_extensions(app)

    return app


def register_extensions(app: Flask) -> None:
    # Providers are built once per process; missing secrets only fail at call time.
    registry = build_registry(app.config)
    app.extensions[EXTENSION_KEY] = GenerationService(registry)
    app.logger.info(
        "Registered AI providers: %s",
        ", ".join(model["id"] for model in registry.list_models()),
    )
