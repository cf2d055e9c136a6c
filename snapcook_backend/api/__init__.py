"""API package wiring for Snap Cook backend."""

from flask import Flask

from .recipes import bp as recipes_bp


def init_app(app: Flask) -> None:
    """Register all API blueprints on the given application."""

    app.register_blueprint(recipes_bp)
