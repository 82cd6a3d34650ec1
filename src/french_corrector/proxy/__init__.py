"""Proxy serveur qui cache la clé API aux clients."""

from .server import create_app, transform_models

__all__ = ["create_app", "transform_models"]
