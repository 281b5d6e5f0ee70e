"""JSON API over the referee store, served with aiohttp."""

from .app import create_app

__all__ = ["create_app"]
